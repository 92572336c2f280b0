"""Walk a local content tree and describe every file that should be published."""

import mimetypes
import os
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path

ContentTypeResolver = Callable[[str], str | None]


def guess_content_type(file_path: str) -> str | None:
    """Guess the MIME type of a file from its extension.

    :returns: The MIME type, or None when the extension is unknown.
    """
    content_type, _ = mimetypes.guess_type(file_path, strict=False)
    return content_type


@dataclass(frozen=True)
class ContentFile:
    absolute_path: Path
    relative_key: str
    content_type: str | None = None


def scan_directory(
    root: str | os.PathLike,
    content_type_resolver: ContentTypeResolver = guess_content_type,
) -> Iterator[ContentFile]:
    """Lazily yield every regular file below `root`, depth first.

    Entries of each directory are visited in sorted name order so that scanning an
    unchanged tree always yields the same sequence. Symbolic links are followed and
    cycles between them are not detected.

    :param root: The directory whose contents will be published.
    :param content_type_resolver: Callable mapping a file path to a MIME type.

    :raises OSError: If `root` does not exist, is not a directory or is unreadable.
    """
    root_path = Path(root).absolute()
    yield from _crawl_directory(root_path, root_path, content_type_resolver)


def _crawl_directory(
    directory: Path, root: Path, content_type_resolver: ContentTypeResolver
) -> Iterator[ContentFile]:
    with os.scandir(directory) as entries:
        children = sorted(entries, key=lambda entry: entry.name)
    for entry in children:
        entry_path = Path(entry.path)
        if entry.is_dir():
            yield from _crawl_directory(entry_path, root, content_type_resolver)
        elif entry.is_file():
            yield ContentFile(
                absolute_path=entry_path,
                relative_key=entry_path.relative_to(root).as_posix(),
                content_type=content_type_resolver(str(entry_path)),
            )
