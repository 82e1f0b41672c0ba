"""User Filter tests — prefix/substring predicates and the sequential-narrowing combinator.

Tests cover:
    - Absent criteria (None, empty, whitespace) return every record in order
    - Case-insensitive prefix match on first and last name
    - Prefix, not substring, for names; substring for email; prefix for phone
    - Phone comparison is not case-folded and ignores surrounding whitespace
    - Records without a last name are skipped when a last-name term is present
    - filter_by_last_name absent term returns a copy, not the input list
    - filter_users: None records, zero criteria, whitespace criteria, AND narrowing
    - Result order always follows input order; inputs never mutated
    - Single-field predicates assert on None records

Design Decisions:
    - Pure core function: no mocks, no fixtures, just data in → data out
"""

import pytest

from usermanagement.core.domain_types import UserId, UserRecord
from usermanagement.core.filter_users import (
    FilterCriteria,
    filter_by_email,
    filter_by_first_name,
    filter_by_last_name,
    filter_by_phone,
    filter_users,
    filter_users_by_criteria,
)


def _make_user(
    user_id: int,
    first_name: str,
    last_name: str | None,
    email: str = "",
    phone: str = "5550000000",
) -> UserRecord:
    return UserRecord(
        id=UserId(user_id),
        first_name=first_name,
        last_name=last_name,
        email=email or f"{first_name.lower()}@example.com",
        phone=phone,
    )


JOHN = _make_user(1, "John", "Doe", "john.doe@example.com", "5551234567")
JANE = _make_user(2, "Jane", "Smith", "jane.smith@example.com", "5559876543")
JONATHAN = _make_user(3, "Jonathan", "Davis", "jon.davis@mail.org", "4441234567")
ALICE = _make_user(4, "Alice", "Wonder", "alice@wonder.land", "+15551112222")

USERS = [JOHN, JANE, JONATHAN, ALICE]


# --- identity for absent criteria ------------------------------------------

@pytest.mark.parametrize("predicate", [
    filter_by_first_name, filter_by_last_name, filter_by_email, filter_by_phone,
])
@pytest.mark.parametrize("term", [None, "", "   "])
def test_absent_term_returns_all_records_in_order(predicate, term):
    assert predicate(USERS, term) == USERS


def test_filter_users_with_no_criteria_returns_input_unchanged():
    assert filter_users(USERS, None, None, None, None) == USERS


def test_filter_users_whitespace_criteria_equal_absent():
    assert filter_users(USERS, "  ", "  ", "  ", "  ") == USERS


def test_filter_users_none_records_returns_empty_list():
    assert filter_users(None, "jo", "doe", "example", "555") == []


def test_filter_users_empty_records_returns_empty_list():
    assert filter_users([], "jo") == []


# --- first name --------------------------------------------------------------

def test_first_name_is_case_insensitive():
    lower = filter_by_first_name(USERS, "john")
    upper = filter_by_first_name(USERS, "JOHN")
    mixed = filter_by_first_name(USERS, "John")
    assert lower == upper == mixed == [JOHN]


def test_first_name_is_prefix_not_substring():
    assert filter_by_first_name(USERS, "oh") == []


def test_first_name_prefix_keeps_input_order():
    assert filter_by_first_name(USERS, "jo") == [JOHN, JONATHAN]


def test_first_name_term_is_trimmed():
    assert filter_by_first_name(USERS, "  ali  ") == [ALICE]


def test_first_name_stored_value_is_trimmed():
    padded = _make_user(9, "  Bob ", "Stone")
    assert filter_by_first_name([padded], "bob") == [padded]


def test_first_name_internal_whitespace_is_significant():
    mary_ann = _make_user(10, "Mary Ann", "Lee")
    assert filter_by_first_name([mary_ann], "mary a") == [mary_ann]
    assert filter_by_first_name([mary_ann], "maryann") == []


def test_first_name_no_match_returns_empty_list():
    assert filter_by_first_name(USERS, "zed") == []


# --- last name ---------------------------------------------------------------

def test_last_name_prefix_case_insensitive():
    assert filter_by_last_name(USERS, "SMI") == [JANE]


def test_last_name_skips_records_without_last_name():
    nameless = _make_user(11, "Cher", None)
    result = filter_by_last_name([nameless, JOHN], "d")
    assert result == [JOHN]


def test_last_name_absent_term_keeps_records_without_last_name():
    nameless = _make_user(11, "Cher", None)
    assert filter_by_last_name([nameless, JOHN], None) == [nameless, JOHN]


def test_last_name_absent_term_returns_copy():
    result = filter_by_last_name(USERS, "")
    assert result == USERS
    assert result is not USERS


# --- email -------------------------------------------------------------------

def test_email_matches_domain_suffix():
    assert filter_by_email(USERS, "@example.com") == [JOHN, JANE]


def test_email_matches_any_fragment():
    assert filter_by_email(USERS, "DAVIS") == [JONATHAN]


def test_email_no_match_returns_empty_list():
    assert filter_by_email(USERS, "nowhere.net") == []


# --- phone -------------------------------------------------------------------

def test_phone_prefix_match():
    assert filter_by_phone(USERS, "555") == [JOHN, JANE]


def test_phone_is_prefix_not_substring():
    assert filter_by_phone(USERS, "1234567") == []


def test_phone_plus_prefix_is_literal():
    assert filter_by_phone(USERS, "+1") == [ALICE]


def test_phone_term_is_trimmed():
    assert filter_by_phone(USERS, " 444 ") == [JONATHAN]


# --- combinator --------------------------------------------------------------

def test_filter_users_first_name_only():
    assert filter_users(USERS, "jo", None, None, None) == [JOHN, JONATHAN]


def test_filter_users_combines_with_and():
    assert filter_users(USERS, "jo", "d", "example", None) == [JOHN]


def test_filter_users_all_four_criteria():
    assert filter_users(USERS, "jon", "dav", "mail.org", "444") == [JONATHAN]


def test_filter_users_conflicting_criteria_yield_empty():
    assert filter_users(USERS, "jane", "doe") == []


def test_filter_users_does_not_mutate_input():
    snapshot = list(USERS)
    filter_users(USERS, "jo", "d")
    assert USERS == snapshot


def test_filter_users_returns_same_record_objects():
    result = filter_users(USERS, email="wonder")
    assert result[0] is ALICE


def test_filter_users_order_of_stages_does_not_change_result_set():
    by_email_first = filter_by_first_name(filter_by_email(USERS, "example"), "j")
    assert filter_users(USERS, "j", None, "example") == by_email_first


def test_filter_users_by_criteria_matches_keyword_form():
    criteria = FilterCriteria(first_name="jo", phone="444")
    assert filter_users_by_criteria(USERS, criteria) == [JONATHAN]


# --- FilterCriteria ----------------------------------------------------------

def test_criteria_normalized_trims_and_drops_blank():
    criteria = FilterCriteria(" jo ", "", "   ", None).normalized()
    assert criteria == FilterCriteria("jo", None, None, None)


def test_criteria_is_empty_for_whitespace_only():
    assert FilterCriteria("  ", "", None, "\t").is_empty
    assert not FilterCriteria(phone="5").is_empty


# --- precondition ------------------------------------------------------------

@pytest.mark.parametrize("predicate", [
    filter_by_first_name, filter_by_last_name, filter_by_email, filter_by_phone,
])
def test_single_field_predicate_asserts_on_none_records(predicate):
    with pytest.raises(AssertionError):
        predicate(None, "x")
