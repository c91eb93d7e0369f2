from __future__ import annotations

from employee_directory.models.employee import Employee
from employee_directory.services.employee_filter import filter_employees


def test_term_matches_username_case_insensitively(sample_employees):
    result = filter_employees(sample_employees[:2], "ali")
    assert result == [sample_employees[0]]


def test_empty_term_returns_everything_in_order(sample_employees):
    result = filter_employees(sample_employees, "")
    assert result == sample_employees
    assert result is not sample_employees


def test_none_and_blank_terms_return_everything(sample_employees):
    assert filter_employees(sample_employees, None) == sample_employees
    assert filter_employees(sample_employees, "   ") == sample_employees


def test_term_matches_email(sample_employees):
    result = filter_employees(sample_employees, "CORP.EXAMPLE")
    assert [e.employee_tag for e in result] == ["E3"]


def test_term_matches_phone_number(sample_employees):
    result = filter_employees(sample_employees, "555-")
    assert [e.employee_tag for e in result] == ["E1", "E2"]


def test_term_is_trimmed(sample_employees):
    assert filter_employees(sample_employees, "  bob ") == [sample_employees[1]]


def test_employee_tag_is_not_searched(sample_employees):
    assert filter_employees(sample_employees, "E1") == []


def test_no_match_returns_empty_list(sample_employees):
    assert filter_employees(sample_employees, "zzz") == []


def test_filter_does_not_mutate_input(sample_employees):
    snapshot = list(sample_employees)
    filter_employees(sample_employees, "alice")
    assert sample_employees == snapshot


def test_unicode_case_folding():
    records = [Employee(employee_tag="E7", username="Jürgen Straße", email="j@example.de", phone_number="1")]
    assert filter_employees(records, "STRASSE") == records
