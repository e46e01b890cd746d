"""Tests for layout schemas and field binding."""

import pytest

from agreement import AGREEMENT_FLOW, AGREEMENT_OVERLAY, GUARDIAN_BLOCK, SCHEMA_VERSION
from answers import DATE_PLACEHOLDER, AnswerModel
from errors import SchemaError
from schema import (
    GUARDIAN_FIELDS,
    MATERIAL_FIELDS,
    Conditional,
    Exhibit,
    FieldId,
    FlowSchema,
    OverlaySchema,
    Paragraph,
    Placement,
    Segment,
    SignatureRow,
    bind_text,
    bind_values,
    plain_text,
)


class TestOverlaySchema:

    def test_agreement_overlay_is_valid(self):
        assert AGREEMENT_OVERLAY.page_count == 7
        assert AGREEMENT_OVERLAY.version == SCHEMA_VERSION
        assert FieldId.CLIENT_SIGNATURE in AGREEMENT_OVERLAY
        assert AGREEMENT_OVERLAY.placement_for(FieldId.CLIENT_SIGNATURE).kind == "image"
        assert all(field_id in AGREEMENT_OVERLAY for field_id in MATERIAL_FIELDS.values())

    def test_unknown_field_is_rejected(self):
        with pytest.raises(SchemaError, match="Unknown field 'favourite_colour'"):
            OverlaySchema({"favourite_colour": {"page": 0, "x": 1, "y": 1}}, page_count=1)

    @pytest.mark.parametrize("page", [-1, 2])
    def test_page_out_of_range(self, page):
        with pytest.raises(SchemaError, match="outside a 2-page template"):
            OverlaySchema({"client_name": {"page": page, "x": 1, "y": 1}}, page_count=2)

    def test_unknown_kind(self):
        with pytest.raises(SchemaError, match="unknown placement kind"):
            OverlaySchema({"client_name": {"page": 0, "x": 1, "y": 1, "kind": "barcode"}}, page_count=1)

    def test_image_needs_a_box(self):
        with pytest.raises(SchemaError, match="width and height"):
            OverlaySchema({"client_signature": {"page": 0, "x": 1, "y": 1, "kind": "image"}}, page_count=1)

    def test_accepts_placement_objects(self):
        schema = OverlaySchema({FieldId.EMAIL: Placement(page=0, x=10, y=20)}, page_count=1)
        assert len(schema) == 1
        assert schema.placement_for(FieldId.EMAIL).y == 20
        assert schema.placement_for(FieldId.FAX) is None

    def test_needs_a_page(self):
        with pytest.raises(SchemaError):
            OverlaySchema({}, page_count=0)


class TestFlowBlocks:

    def test_bad_placeholder_fails_at_construction(self):
        with pytest.raises(SchemaError, match="Unknown field 'clinet_name'"):
            Paragraph("Client: {clinet_name}")

    def test_signature_label_placeholders_are_checked(self):
        with pytest.raises(SchemaError):
            SignatureRow(label="Staff of {clinic}")

    def test_exhibit_caption_placeholders_are_checked(self):
        with pytest.raises(SchemaError):
            Exhibit(title="ID", image=FieldId.ID_DOCUMENT, caption="{nope}")

    def test_unknown_condition(self):
        with pytest.raises(SchemaError, match="Unknown condition"):
            Conditional(when="is_vip")

    def test_guardian_block_only_for_minors(self, jane):
        adult = AGREEMENT_FLOW.visible_blocks(jane)
        minor = AGREEMENT_FLOW.visible_blocks(AnswerModel(client_name="Kid", email="k@x.com", is_minor=True))
        assert len(minor) - len(adult) == len(GUARDIAN_BLOCK.blocks)
        assert not any(isinstance(b, SignatureRow) and b.image == FieldId.GUARDIAN_SIGNATURE for b in adult)
        assert any(isinstance(b, SignatureRow) and b.image == FieldId.GUARDIAN_SIGNATURE for b in minor)

    def test_identity_exhibit_needs_a_document(self, jane, signature_png):
        assert not any(isinstance(b, Exhibit) for b in AGREEMENT_FLOW.visible_blocks(jane))
        with_id = AnswerModel(client_name="A", email="a@x.com", id_document=signature_png)
        assert any(isinstance(b, Exhibit) for b in AGREEMENT_FLOW.visible_blocks(with_id))

    def test_conditionals_never_leak_into_visible_blocks(self, jane):
        schema = FlowSchema(blocks=(Conditional("is_minor", (Conditional("has_id_document", ()),)),))
        assert schema.visible_blocks(jane) == []
        assert not any(isinstance(b, Conditional) for b in AGREEMENT_FLOW.visible_blocks(jane))


class TestBinding:

    def test_values_are_formatted(self, jane):
        values = bind_values(jane, "Alpha Fertility")
        assert values[FieldId.CLIENT_DOB] == "01/01/1990"
        assert values[FieldId.PARTNER_DOB] == DATE_PLACEHOLDER
        assert values[FieldId.FACILITY_NAME] == "Alpha Fertility"
        assert values[FieldId.MATERIAL_EMBRYO] is True
        assert values[FieldId.MATERIAL_DONOR_EGGS] is False

    def test_guardian_fields_only_bound_for_minor(self, jane):
        assert not GUARDIAN_FIELDS & bind_values(jane, "").keys()
        minor = AnswerModel(client_name="Kid", email="k@x.com", is_minor=True, guardian_name="Mum")
        values = bind_values(minor, "")
        assert GUARDIAN_FIELDS <= values.keys()
        assert values[FieldId.GUARDIAN_NAME] == "Mum"

    def test_bind_text_marks_values(self):
        values = {FieldId.CLIENT_NAME: "Jane Doe", FieldId.CLIENT_DOB: "01/01/1990"}
        segments = bind_text("I, {client_name} DOB {client_dob}.", values)
        assert segments == [
            Segment("I, "),
            Segment("Jane Doe", is_value=True),
            Segment(" DOB "),
            Segment("01/01/1990", is_value=True),
            Segment("."),
        ]

    def test_unbound_value_is_empty(self):
        assert plain_text("Guardian: {guardian_name}", {}) == "Guardian: "
