"""Tests for budget definition parsing."""

from decimal import Decimal

import pytest

from reelcost.domain.errors import ParseError
from reelcost.utils.budget_parser import parse_budget_definition


def test_parse_sample_budget(budget_xml):
    lines = parse_budget_definition(budget_xml)

    assert [line.account_number for line in lines] == ["1001", "2001", "2005"]
    camera = lines[1]
    assert camera.account_description == "Camera rental"
    assert camera.category_number == "20"
    assert camera.category_description == "Camera"
    assert camera.original_amount == Decimal("150000.50")
    assert lines[2].original_amount == Decimal("80000.00")


def test_accounts_with_unknown_category_are_skipped(budget_xml):
    lines = parse_budget_definition(budget_xml)
    assert "9001" not in {line.account_number for line in lines}


def test_missing_or_invalid_total_is_zero():
    xml = """
    <budget>
      <category><cID>1</cID><cNumber>10</cNumber><cDescription>Staff</cDescription></category>
      <account><categoryID>1</categoryID><aNumber>1001</aNumber><aDescription>A</aDescription></account>
      <account><categoryID>1</categoryID><aNumber>1002</aNumber><aTotal>n/a</aTotal></account>
    </budget>
    """
    lines = parse_budget_definition(xml)
    assert [line.original_amount for line in lines] == [Decimal("0"), Decimal("0")]
    assert lines[1].account_description == ""


def test_account_without_number_is_skipped():
    xml = """
    <budget>
      <category><cID>1</cID><cNumber>10</cNumber><cDescription>Staff</cDescription></category>
      <account><categoryID>1</categoryID><aNumber> </aNumber><aTotal>5</aTotal></account>
      <account><categoryID>1</categoryID><aNumber>1002</aNumber><aTotal>7</aTotal></account>
    </budget>
    """
    lines = parse_budget_definition(xml)
    assert [line.account_number for line in lines] == ["1002"]


def test_malformed_xml_raises():
    with pytest.raises(ParseError, match="not valid XML"):
        parse_budget_definition("<budget><account>")


def test_empty_content_raises():
    with pytest.raises(ParseError):
        parse_budget_definition("   ")


def test_no_valid_lines_raises():
    xml = "<budget><account><aNumber>1</aNumber><categoryID>3</categoryID></account></budget>"
    with pytest.raises(ParseError, match="no valid budget lines"):
        parse_budget_definition(xml)
