"""Layout schemas: where each answer lands in the finished document.

Two kinds of schema exist. A :class:`FlowSchema` is an ordered list of content
blocks laid out top to bottom by a renderer that paginates on its own. An
:class:`OverlaySchema` pins each field to literal coordinates on a fixed
multi-page template. Both are checked when they are built, so a bad field name
or page index fails at authoring time instead of vanishing at render time.
"""
import enum
import string
from dataclasses import dataclass
from typing import Optional, Tuple

from answers import MATERIALS, Disposition, Scenario, format_date
from errors import SchemaError


class FieldId(enum.Enum):
    CLIENT_NAME = "client_name"
    CLIENT_DOB = "client_dob"
    PARTNER_NAME = "partner_name"
    PARTNER_DOB = "partner_dob"
    ADDRESS = "address"
    CITY = "city"
    STATE = "state"
    ZIP_CODE = "zip_code"
    PHONE = "phone"
    CELL = "cell"
    FAX = "fax"
    EMAIL = "email"
    PATIENT_OF = "patient_of"
    FACILITY_NAME = "facility_name"

    MATERIAL_EMBRYO = "material_embryo"
    MATERIAL_SPERM = "material_sperm"
    MATERIAL_OOCYTES = "material_oocytes"
    MATERIAL_OVARIAN_TISSUE = "material_ovarian_tissue"
    MATERIAL_ENDOMETRIAL_TISSUE = "material_endometrial_tissue"
    MATERIAL_DONOR_EMBRYO = "material_donor_embryo"
    MATERIAL_DONOR_SEMEN = "material_donor_semen"
    MATERIAL_DONOR_EGGS = "material_donor_eggs"
    OTHER_MATERIAL = "other_material"

    CLIENT_SIGNATURE = "client_signature"
    CLIENT_NAME_PRINT = "client_name_print"
    CLIENT_DATE = "client_date"
    PARTNER_SIGNATURE = "partner_signature"
    PARTNER_NAME_PRINT = "partner_name_print"
    PARTNER_DATE = "partner_date"
    GUARDIAN_SIGNATURE = "guardian_signature"
    GUARDIAN_NAME = "guardian_name"
    GUARDIAN_DATE = "guardian_date"
    STAFF_SIGNATURE = "staff_signature"
    STAFF_NAME = "staff_name"
    STAFF_DATE = "staff_date"
    WITNESS_SIGNATURE = "witness_signature"
    WITNESS_NAME = "witness_name"
    WITNESS_DATE = "witness_date"
    ID_DOCUMENT = "id_document"


MATERIAL_FIELDS = {
    label: FieldId("material_" + label.lower().replace(" ", "_")) for label in MATERIALS
}

IMAGE_FIELDS = frozenset({
    FieldId.CLIENT_SIGNATURE,
    FieldId.PARTNER_SIGNATURE,
    FieldId.GUARDIAN_SIGNATURE,
    FieldId.ID_DOCUMENT,
})

GUARDIAN_FIELDS = frozenset({FieldId.GUARDIAN_SIGNATURE, FieldId.GUARDIAN_NAME, FieldId.GUARDIAN_DATE})

PREDICATES = {
    "is_minor": lambda answers: answers.needs_guardian,
    "has_id_document": lambda answers: bool(answers.id_document),
}


def as_field(key) -> FieldId:
    if isinstance(key, FieldId):
        return key
    try:
        return FieldId(key)
    except ValueError:
        raise SchemaError(f"Unknown field '{key}'")


# ── flow blocks ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Letterhead:
    """Clinic name, address and agreement title at the top of page one."""
    title: str


@dataclass(frozen=True)
class Heading:
    text: str


@dataclass(frozen=True)
class Paragraph:
    """Boilerplate text with ``{field_id}`` insertion points."""
    text: str
    lead: str = ""
    indent: bool = False
    bold: bool = False

    def __post_init__(self):
        for name in placeholders(self.text) + placeholders(self.lead):
            as_field(name)


@dataclass(frozen=True)
class CheckboxRow:
    items: Tuple[Tuple[FieldId, str], ...]
    other: Optional[FieldId] = None


@dataclass(frozen=True)
class OptionList:
    """One disposition scenario: optional intro, then one checkbox line per option."""
    scenario: Scenario
    options: Tuple[Tuple[Disposition, str], ...]
    intro: str = ""
    initials: str = "_____ Client initials / _____ Partner initials (if applicable)"

    def __post_init__(self):
        Scenario(self.scenario)
        for name in placeholders(self.intro):
            as_field(name)
        for option, _ in self.options:
            Disposition(option)


@dataclass(frozen=True)
class SignatureRow:
    label: str
    image: Optional[FieldId] = None
    text: Optional[FieldId] = None
    name: Optional[FieldId] = None
    date: Optional[FieldId] = None

    def __post_init__(self):
        for name in placeholders(self.label):
            as_field(name)


@dataclass(frozen=True)
class Rule:
    pass


@dataclass(frozen=True)
class Exhibit:
    title: str
    image: FieldId
    caption: str = ""

    def __post_init__(self):
        for name in placeholders(self.caption):
            as_field(name)


@dataclass(frozen=True)
class PageBreak:
    pass


@dataclass(frozen=True)
class Conditional:
    when: str
    blocks: Tuple = ()

    def __post_init__(self):
        if self.when not in PREDICATES:
            raise SchemaError(f"Unknown condition '{self.when}'")


def placeholders(text):
    return [name for _, name, _, _ in string.Formatter().parse(text or "") if name]


@dataclass(frozen=True)
class FlowSchema:
    blocks: Tuple
    version: str = ""

    def visible_blocks(self, answers):
        """Flatten the tree for one answer set, dropping closed conditionals."""
        return list(_expand(self.blocks, answers))


def _expand(blocks, answers):
    for block in blocks:
        if isinstance(block, Conditional):
            if PREDICATES[block.when](answers):
                yield from _expand(block.blocks, answers)
        else:
            yield block


# ── overlay placements ───────────────────────────────────────────────────────

PLACEMENT_KINDS = ("text", "heading", "check", "image")


@dataclass(frozen=True)
class Placement:
    page: int
    x: float
    y: float
    width: Optional[float] = None
    height: Optional[float] = None
    kind: str = "text"


class OverlaySchema:
    """Field → literal coordinates on a fixed template of ``page_count`` pages."""

    def __init__(self, placements, page_count, version=""):
        if page_count < 1:
            raise SchemaError("An overlay template needs at least one page")
        self.page_count = page_count
        self.version = version
        self._placements = {}
        for key, entry in placements.items():
            field_id = as_field(key)
            placement = entry if isinstance(entry, Placement) else Placement(**entry)
            if placement.kind not in PLACEMENT_KINDS:
                raise SchemaError(f"{field_id.value}: unknown placement kind '{placement.kind}'")
            if not 0 <= placement.page < page_count:
                raise SchemaError(
                    f"{field_id.value}: page {placement.page} is outside a {page_count}-page template"
                )
            if placement.kind == "image" and not (placement.width and placement.height):
                raise SchemaError(f"{field_id.value}: image placements need a width and height")
            self._placements[field_id] = placement

    def placement_for(self, field_id) -> Optional[Placement]:
        return self._placements.get(field_id)

    def items(self):
        return self._placements.items()

    def __len__(self):
        return len(self._placements)

    def __contains__(self, field_id):
        return field_id in self._placements


# ── binding ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Segment:
    text: str
    is_value: bool = False


def bind_values(answers, facility_default):
    """Resolve every :class:`FieldId` against an answer set.

    Strings come back formatted, material checkboxes as booleans and image
    fields as references (or ``None``). Guardian fields are bound only for a
    minor client.
    """
    values = {
        FieldId.CLIENT_NAME: answers.client_name,
        FieldId.CLIENT_DOB: format_date(answers.client_dob),
        FieldId.PARTNER_NAME: answers.partner_name,
        FieldId.PARTNER_DOB: format_date(answers.partner_dob),
        FieldId.ADDRESS: answers.address,
        FieldId.CITY: answers.city,
        FieldId.STATE: answers.state,
        FieldId.ZIP_CODE: answers.zip_code,
        FieldId.PHONE: answers.phone,
        FieldId.CELL: answers.cell,
        FieldId.FAX: answers.fax,
        FieldId.EMAIL: answers.email,
        FieldId.PATIENT_OF: answers.patient_of,
        FieldId.FACILITY_NAME: answers.facility(facility_default),
        FieldId.OTHER_MATERIAL: answers.other_text,
        FieldId.CLIENT_SIGNATURE: answers.client_signature,
        FieldId.CLIENT_NAME_PRINT: answers.client_name,
        FieldId.CLIENT_DATE: format_date(answers.client_signature_date),
        FieldId.PARTNER_SIGNATURE: answers.partner_signature,
        FieldId.PARTNER_NAME_PRINT: answers.partner_name,
        FieldId.PARTNER_DATE: format_date(answers.partner_signature_date),
        FieldId.STAFF_SIGNATURE: answers.staff_signature,
        FieldId.STAFF_NAME: answers.staff_name,
        FieldId.STAFF_DATE: format_date(answers.staff_signature_date),
        FieldId.WITNESS_SIGNATURE: answers.witness_signature,
        FieldId.WITNESS_NAME: answers.witness_name,
        FieldId.WITNESS_DATE: format_date(answers.witness_signature_date),
        FieldId.ID_DOCUMENT: answers.id_document,
    }
    for label, field_id in MATERIAL_FIELDS.items():
        values[field_id] = answers.material_selected(label)
    if answers.needs_guardian:
        values[FieldId.GUARDIAN_SIGNATURE] = answers.guardian_signature
        values[FieldId.GUARDIAN_NAME] = answers.guardian_name
        values[FieldId.GUARDIAN_DATE] = format_date(answers.guardian_signature_date)
    return values


def bind_text(text, values):
    """Split ``text`` into literal and bound segments."""
    segments = []
    for literal, name, _, _ in string.Formatter().parse(text or ""):
        if literal:
            segments.append(Segment(literal))
        if name:
            value = values.get(as_field(name))
            segments.append(Segment("" if value is None else str(value), is_value=True))
    return segments


def plain_text(text, values):
    return "".join(segment.text for segment in bind_text(text, values))
