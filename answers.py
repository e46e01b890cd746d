"""Client answers for the storage agreement.

The :class:`AnswerModel` is built once per submission (usually through
:meth:`AnswerModel.from_form`) and is never mutated afterwards; steps that need
to change it, such as asset resolution, work on a copy made with
:func:`dataclasses.replace`.
"""
import enum
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from types import MappingProxyType
from typing import Mapping, Optional, Union

from errors import ValidationError

DATE_PLACEHOLDER = "____/____/______"
CHECKED = "☑"
UNCHECKED = "☐"

MATERIALS = (
    "Embryo",
    "Sperm",
    "Oocytes",
    "Ovarian Tissue",
    "Endometrial Tissue",
    "Donor Embryo",
    "Donor Semen",
    "Donor Eggs",
)

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Hosted URL, data: URL or raw image bytes
ImageRef = Union[str, bytes, None]


class Scenario(enum.Enum):
    DEATH_OF_CLIENT = "death_of_client"
    DEATH_OF_PARTNER = "death_of_partner"
    DEATH_OF_BOTH = "death_of_both"
    DIVORCE = "divorce"
    UNDECIDED = "undecided"
    FAILURE_TO_PAY = "failure_to_pay"
    AGE_LIMIT = "age_limit"
    LOST_CONTACT = "lost_contact"


class Disposition(enum.Enum):
    TRANSFER = "transfer"
    DONATE_INFERTILE = "donate_infertile"
    DONATE_RESEARCH = "donate_research"
    DISCARD = "discard"
    PLACE_AT_DISPOSAL = "place_at_disposal"


# Wire names used by the intake form for each scenario group
_FORM_SCENARIOS = {
    Scenario.DEATH_OF_CLIENT: ("deathOptions", "client"),
    Scenario.DEATH_OF_PARTNER: ("deathOptions", "partner"),
    Scenario.DEATH_OF_BOTH: ("deathOptions", "both"),
    Scenario.DIVORCE: ("divorceOptions",),
    Scenario.UNDECIDED: ("unableToDecideOptions",),
    Scenario.FAILURE_TO_PAY: ("failToPayOptions",),
    Scenario.AGE_LIMIT: ("storageTimeOptions",),
    Scenario.LOST_CONTACT: ("noLongerReceivingOptions",),
}

_FORM_OPTIONS = {
    "transferToPartner": Disposition.TRANSFER,
    "transferToClient": Disposition.TRANSFER,
    "donateToInfertile": Disposition.DONATE_INFERTILE,
    "donateToResearch": Disposition.DONATE_RESEARCH,
    "discard": Disposition.DISCARD,
    "placeAtDisposal": Disposition.PLACE_AT_DISPOSAL,
}


def format_date(value) -> str:
    """Format a date as ``MM/DD/YYYY``.

    Accepts ``date``/``datetime`` objects, ISO strings (``2024-03-05`` or a full
    timestamp) and ``MM/DD/YYYY`` strings. Anything missing or unparseable
    gives the blank-line placeholder; this never raises.
    """
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return f"{value.month:02d}/{value.day:02d}/{value.year:04d}"
    if not value or not isinstance(value, str):
        return DATE_PLACEHOLDER

    text = value.strip()
    match = _US_DATE.match(text)
    try:
        if match:
            month, day, year = (int(part) for part in match.groups())
            parsed = date(year, month, day)
        else:
            # Only the calendar part counts, so a trailing time or zone never shifts the day
            parsed = date.fromisoformat(text[:10])
    except ValueError:
        return DATE_PLACEHOLDER
    return format_date(parsed)


def render_checkbox(value) -> str:
    return CHECKED if value is True else UNCHECKED


def canonical_material(label) -> Optional[str]:
    """Map a free-form label onto the known vocabulary, or ``None``."""
    if not isinstance(label, str):
        return None
    squashed = re.sub(r"\s+", "", label).lower()
    for known in MATERIALS:
        if known.replace(" ", "").lower() == squashed:
            return known
    return None


def _frozen_dispositions(choices) -> Mapping:
    cleaned = {}
    for scenario, options in (choices or {}).items():
        scenario = Scenario(scenario)
        cleaned[scenario] = frozenset(Disposition(option) for option in options)
    return MappingProxyType(cleaned)


@dataclass(frozen=True)
class AnswerModel:
    client_name: str
    email: str
    client_dob: Optional[str] = None
    partner_name: str = ""
    partner_dob: Optional[str] = None
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    phone: str = ""
    cell: str = ""
    fax: str = ""
    patient_of: str = ""

    materials: frozenset = frozenset()
    other_material: str = ""
    dispositions: Mapping = field(default_factory=dict)

    is_minor: bool = False
    guardian_name: str = ""
    guardian_signature: ImageRef = None
    guardian_signature_date: Optional[str] = None

    client_signature: ImageRef = None
    client_signature_date: Optional[str] = None
    partner_signature: ImageRef = None
    partner_signature_date: Optional[str] = None
    staff_signature: str = ""
    staff_name: str = ""
    staff_signature_date: Optional[str] = None
    witness_signature: str = ""
    witness_name: str = ""
    witness_signature_date: Optional[str] = None

    id_document: ImageRef = None
    facility_name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "materials", frozenset(self.materials or ()))
        object.__setattr__(self, "dispositions", _frozen_dispositions(self.dispositions))

    # --- checkbox state ---

    def material_selected(self, label) -> bool:
        return label in self.materials

    def chosen(self, scenario, option) -> bool:
        return Disposition(option) in self.dispositions.get(Scenario(scenario), frozenset())

    @property
    def other_text(self):
        """Free-text "other" material, including any label outside the vocabulary."""
        unknown = sorted(label for label in self.materials if label not in MATERIALS)
        parts = [self.other_material.strip()] if self.other_material and self.other_material.strip() else []
        parts.extend(str(label) for label in unknown)
        return ", ".join(parts)

    def facility(self, default):
        return self.facility_name.strip() or default

    @property
    def needs_guardian(self):
        return self.is_minor is True

    # --- validation ---

    def validate(self):
        missing = []
        if not (self.client_name or "").strip():
            missing.append("clientName")
        if not (self.email or "").strip():
            missing.append("email")
        elif not _EMAIL.match(self.email.strip()):
            missing.append("email (invalid address)")
        if missing:
            raise ValidationError(missing)
        return self

    # --- construction from the intake payload ---

    @classmethod
    def from_form(cls, payload, today=None):
        """Build the model from an intake payload.

        Both the agreement payload (``clientName``, ``clientEmail``) and the
        registration payload (``firstName``/``middleName``/``lastName``,
        ``email``, ``dateOfBirth``) are understood. ``today`` is used as the
        default date for the client, staff and witness signatures.
        """
        get = payload.get

        client_name = (get("clientName") or "").strip()
        if not client_name:
            parts = [get("firstName"), get("middleName"), get("lastName")]
            client_name = " ".join(p.strip() for p in parts if p and p.strip())

        materials = set()
        unknown = []
        for label in get("reproductiveMaterials") or ():
            known = canonical_material(label)
            if known:
                materials.add(known)
            elif label:
                unknown.append(str(label))
        other = ", ".join(p for p in [(get("otherMaterial") or "").strip()] + unknown if p)

        dispositions = {}
        for scenario, path in _FORM_SCENARIOS.items():
            group = payload
            for key in path:
                group = group.get(key) if isinstance(group, Mapping) else None
            if not isinstance(group, Mapping):
                continue
            picked = {option for name, option in _FORM_OPTIONS.items() if group.get(name) is True}
            if picked:
                dispositions[scenario] = picked

        return cls(
            client_name=client_name,
            email=(get("clientEmail") or get("email") or "").strip(),
            client_dob=get("clientDOB") or get("dateOfBirth"),
            partner_name=get("partnerName") or "",
            partner_dob=get("partnerDOB"),
            address=get("clientAddress") or get("address") or "",
            city=get("clientCity") or get("city") or "",
            state=get("clientState") or get("state") or "",
            zip_code=get("clientZIP") or get("zip") or "",
            phone=get("clientTel") or get("phone") or "",
            cell=get("clientCell") or get("cell") or "",
            fax=get("clientFax") or get("fax") or "",
            patient_of=get("patientOf") or "",
            materials=frozenset(materials),
            other_material=other,
            dispositions=dispositions,
            is_minor=get("isMinor") is True,
            guardian_name=get("parentGuardianName") or "",
            guardian_signature=get("parentGuardianSignature") or get("parentGuardianSignatureUrl"),
            guardian_signature_date=get("parentGuardianSignatureDate"),
            client_signature=get("clientSignature") or get("signatureUrl"),
            client_signature_date=get("clientSignatureDate") or today,
            partner_signature=get("partnerSignature") or get("partnerSignatureUrl"),
            partner_signature_date=get("partnerSignatureDate"),
            staff_signature=get("staffSignature") or "",
            staff_name=get("staffName") or "",
            staff_signature_date=get("staffSignatureDate") or today,
            witness_signature=get("witnessSignature") or "",
            witness_name=get("witnessName") or "",
            witness_signature_date=get("witnessSignatureDate") or today,
            id_document=get("idDocument"),
            facility_name=get("facilityName") or "",
        )
