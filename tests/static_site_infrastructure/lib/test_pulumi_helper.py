from static_site_infrastructure.lib.pulumi_helper import stack_info_from_name


def test_stack_info_from_nested_stack_name():
    stack_info = stack_info_from_name("sites.docs.Production")
    assert stack_info.name == "Production"
    assert stack_info.namespace == "sites.docs"
    assert stack_info.env_suffix == "production"
    assert stack_info.env_prefix == "docs"
    assert stack_info.full_name == "sites.docs.Production"


def test_stack_info_from_bare_stack_name():
    stack_info = stack_info_from_name("QA")
    assert stack_info.name == "QA"
    assert stack_info.env_suffix == "qa"
    assert stack_info.namespace == "QA"
