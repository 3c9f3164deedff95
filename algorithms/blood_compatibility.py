"""
Blood Type Compatibility Table
Determines which donor blood types can donate to which requested blood types
"""

BLOOD_TYPES = ['A+', 'A-', 'B+', 'B-', 'AB+', 'AB-', 'O+', 'O-']

BLOOD_TYPE_CHOICES = [(blood_type, blood_type) for blood_type in BLOOD_TYPES]

# Requested blood type -> donor blood types it may receive from
COMPATIBLE_DONORS = {
    'O-': frozenset({'O-'}),
    'O+': frozenset({'O+', 'O-'}),
    'A-': frozenset({'A-', 'O-'}),
    'A+': frozenset({'A+', 'A-', 'O+', 'O-'}),
    'B-': frozenset({'B-', 'O-'}),
    'B+': frozenset({'B+', 'B-', 'O+', 'O-'}),
    'AB-': frozenset({'AB-', 'A-', 'B-', 'O-'}),
    'AB+': frozenset(BLOOD_TYPES),  # Universal recipient
}


def compatible_donor_types(requested_blood_type):
    """
    Get the donor blood types that can donate to a requested blood type

    Args:
        requested_blood_type: Blood type needed by the patient (e.g., 'AB-')

    Returns:
        frozenset of donor blood types

    Raises:
        KeyError: for anything outside the 8 ABO/Rh types. Inputs are
        validated before they get here.
    """
    return COMPATIBLE_DONORS[requested_blood_type]


def is_compatible(donor_blood_type, requested_blood_type):
    """
    Check if a donor blood type can donate to a requested blood type

    Returns:
        Boolean: True if compatible, False otherwise (including unknown types)
    """
    if requested_blood_type not in COMPATIBLE_DONORS:
        return False

    return donor_blood_type in COMPATIBLE_DONORS[requested_blood_type]


def compatible_recipient_types(donor_blood_type):
    """
    Get the requested blood types a donor can give to

    Args:
        donor_blood_type: Donor's blood type

    Returns:
        frozenset of requested blood types (empty for an unknown type)
    """
    return frozenset(
        requested for requested, donors in COMPATIBLE_DONORS.items()
        if donor_blood_type in donors
    )
