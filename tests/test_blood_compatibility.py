import pytest

from algorithms.blood_compatibility import (
    BLOOD_TYPES,
    compatible_donor_types,
    compatible_recipient_types,
    is_compatible,
)

CHART = {
    'O-': {'O-'},
    'O+': {'O+', 'O-'},
    'A-': {'A-', 'O-'},
    'A+': {'A+', 'A-', 'O+', 'O-'},
    'B-': {'B-', 'O-'},
    'B+': {'B+', 'B-', 'O+', 'O-'},
    'AB-': {'AB-', 'A-', 'B-', 'O-'},
    'AB+': set(BLOOD_TYPES),
}


@pytest.mark.parametrize('requested, donors', CHART.items())
def test_compatible_donor_types_matches_chart(requested, donors):
    assert compatible_donor_types(requested) == frozenset(donors)


def test_every_type_can_receive_its_own_type():
    for blood_type in BLOOD_TYPES:
        assert blood_type in compatible_donor_types(blood_type)


def test_unknown_type_raises_key_error():
    with pytest.raises(KeyError):
        compatible_donor_types('C+')


def test_is_compatible():
    assert is_compatible('O-', 'AB+')
    assert is_compatible('A-', 'AB-')
    assert not is_compatible('A+', 'AB-')
    assert not is_compatible('O+', 'O-')
    assert not is_compatible('O-', 'nonsense')


def test_o_negative_is_universal_donor():
    assert compatible_recipient_types('O-') == frozenset(BLOOD_TYPES)


def test_ab_positive_only_gives_to_ab_positive():
    assert compatible_recipient_types('AB+') == frozenset({'AB+'})
    assert compatible_recipient_types('unknown') == frozenset()
