import copy

from static_site_infrastructure.edge.header_rewrite import (
    SECURITY_HEADERS,
    lambda_handler,
    rewrite_headers,
)

LAST_MODIFIED = "Wed, 01 Jan 2020 00:00:00 GMT"


def header_values(response):
    return {
        entries[0]["key"]: entries[0]["value"]
        for entries in response["headers"].values()
    }


def origin_response_event(headers):
    return {
        "Records": [
            {
                "cf": {
                    "config": {"eventType": "origin-response"},
                    "response": {
                        "status": "200",
                        "statusDescription": "OK",
                        "headers": headers,
                    },
                }
            }
        ]
    }


def test_last_modified_metadata_is_promoted():
    response = {
        "headers": {
            "x-amz-meta-last-modified": [
                {"key": "x-amz-meta-last-modified", "value": LAST_MODIFIED}
            ]
        }
    }
    values = header_values(rewrite_headers(response))
    assert values["Last-Modified"] == LAST_MODIFIED
    assert response["headers"]["last-modified"] == [
        {"key": "Last-Modified", "value": LAST_MODIFIED}
    ]
    for name, value in SECURITY_HEADERS.items():
        assert values[name] == value
    # The metadata header itself is left in place
    assert values["x-amz-meta-last-modified"] == LAST_MODIFIED
    assert len(values) == len(SECURITY_HEADERS) + 2


def test_no_last_modified_without_metadata():
    values = header_values(rewrite_headers({"headers": {}}))
    assert "Last-Modified" not in values
    assert values == SECURITY_HEADERS


def test_metadata_header_is_matched_case_insensitively():
    response = {
        "headers": {
            "X-Amz-Meta-Last-Modified": [
                {"key": "X-Amz-Meta-Last-Modified", "value": LAST_MODIFIED}
            ]
        }
    }
    assert header_values(rewrite_headers(response))["Last-Modified"] == LAST_MODIFIED


def test_existing_last_modified_is_overwritten():
    response = {
        "headers": {
            "last-modified": [{"key": "Last-Modified", "value": "yesterday"}],
            "x-amz-meta-last-modified": [
                {"key": "x-amz-meta-last-modified", "value": LAST_MODIFIED}
            ],
        }
    }
    rewrite_headers(response)
    assert response["headers"]["last-modified"] == [
        {"key": "Last-Modified", "value": LAST_MODIFIED}
    ]


def test_security_headers_replace_origin_values():
    response = {
        "headers": {
            "cache-control": [{"key": "Cache-Control", "value": "max-age=600"}],
            "Content-Type": [{"key": "Content-Type", "value": "text/html"}],
        }
    }
    values = header_values(rewrite_headers(response))
    assert values["Cache-Control"] == SECURITY_HEADERS["Cache-Control"]
    assert values["Content-Type"] == "text/html"
    assert "Content-Type" in response["headers"]


def test_malformed_metadata_header_is_skipped():
    response = {"headers": {"x-amz-meta-last-modified": []}}
    headers = rewrite_headers(response)["headers"]
    assert "last-modified" not in headers
    assert response["headers"]["x-amz-meta-last-modified"] == []


def test_missing_header_map_is_created():
    assert header_values(rewrite_headers({"status": "200"})) == SECURITY_HEADERS


def test_handler_returns_the_event_response():
    event = origin_response_event(
        {
            "x-amz-meta-last-modified": [
                {"key": "x-amz-meta-last-modified", "value": LAST_MODIFIED}
            ]
        }
    )
    original = copy.deepcopy(event)
    response = lambda_handler(event, None)
    assert response is event["Records"][0]["cf"]["response"]
    assert response["status"] == original["Records"][0]["cf"]["response"]["status"]
    assert header_values(response)["Last-Modified"] == LAST_MODIFIED
