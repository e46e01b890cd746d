"""The Reproductive Material(s) Storage Agreement, as layout schemas.

``AGREEMENT_FLOW`` is the boilerplate for the flow renderers. Page breaks sit at
the same clause boundaries as the printed agreement, so page numbers stay put
whatever the fonts do. ``AGREEMENT_OVERLAY`` positions the answers on the
pre-printed seven page template (``forms/agreement.pdf``).
"""
from answers import Disposition, Scenario
from schema import (
    CheckboxRow,
    Conditional,
    Exhibit,
    FieldId,
    FlowSchema,
    Heading,
    Letterhead,
    MATERIAL_FIELDS,
    OptionList,
    OverlaySchema,
    PageBreak,
    Paragraph,
    Rule,
    SignatureRow,
)

SCHEMA_VERSION = "FCLAB-RMSA-2024.1"

FACILITY = "FCLAB &/or {facility_name}"

_INFERTILE = "Donated to infertile couples"
_RESEARCH = "Donated for medical research"
_DISCARD = "Discarded"


def _standard_options(first=1):
    numerals = ("i", "ii", "iii", "iv")
    labels = (
        (Disposition.DONATE_INFERTILE, _INFERTILE),
        (Disposition.DONATE_RESEARCH, _RESEARCH),
        (Disposition.DISCARD, _DISCARD),
    )
    return tuple(
        (option, f"{numerals[first - 1 + i]}. {text}") for i, (option, text) in enumerate(labels)
    )


PAGE_1 = (
    Letterhead(title="REPRODUCTIVE MATERIAL(s) STORAGE AGREEMENT"),
    Paragraph('I (we), {client_name} DOB {client_dob} (the "Client")'),
    Paragraph('and, {partner_name} DOB {partner_dob} (the "Partner," if applicable)'),
    Paragraph(
        '(The Client and Partner (if applicable) shall be referred to collectively as the '
        '"Client(s)") wish to transfer the following "Reproductive Material(s)" to FCLAB for '
        'continued storage:'
    ),
    CheckboxRow(items=tuple((field_id, label) for label, field_id in MATERIAL_FIELDS.items()),
                other=FieldId.OTHER_MATERIAL),
    Paragraph(
        "FCLAB collects, tests, stores and freezes human sperm, embryos, eggs and other "
        "reproductive materials in connection with assisted reproductive technology treatment.",
        lead="1.", bold=True,
    ),
    Paragraph(
        "Client is a patient of {patient_of} (if applicable) and has frozen or intends to freeze "
        "the Reproductive Material(s) indicated above in assisted reproductive technologies or "
        "artificial insemination. Client(s) desire to deposit Reproductive Material(s) with FCLAB.",
        lead="2.",
    ),
    Paragraph(
        "Client(s) and FCLAB acknowledge that FCLAB will freeze and/or store Reproductive "
        "Material(s) according to the terms and conditions set forth below.",
        lead="3.",
    ),
    Heading("4. REPRODUCTIVE MATERIAL(S) STORAGE"),
    Paragraph(
        "Concurrently with the execution of this Agreement and thereafter, Client(s) will deposit "
        "Reproductive Material(s) for storage by FCLAB. In the event that Client(s) cannot provide "
        "a current laboratory evaluation of the Reproductive Material(s) as required by FCLAB, "
        "FCLAB will obtain such an evaluation at Client(s)' sole cost and expense, which Client(s) "
        "will pay in advance."
    ),
    Heading("5. LENGTH OF STORAGE"),
    Paragraph(
        'This Agreement shall commence on the date of receipt of Reproductive Material(s) and '
        'shall continue for a period of one (1) year ("Storage Period"), subject to earlier '
        'termination as hereinafter provided. Thereafter this Agreement shall be automatically '
        'renewed for successive Storage Periods, unless either party provides written notice to '
        'the other of his/her or its intent not to renew at least thirty (30) days prior to the '
        'anniversary date of a Storage Period.'
    ),
)

PAGE_2 = (
    PageBreak(),
    Heading("6. STORAGE FEES"),
    Paragraph(
        'Client(s) agree(s) to pay FCLAB, as compensation for its storage services hereunder, in '
        'the amount of $500.00 for Embryos or $250.00 for Sperm ("Storage Fee") per Storage '
        'Period, payable upon signing this Agreement. Storage Fees are nonrefundable and will not '
        'be prorated in the event this Agreement is terminated during a Storage Period. FCLAB may '
        'increase the Storage Fee for subsequent Storage Periods only upon written notice to '
        'Client(s) prior to expiration of the current Storage Period. In addition to the Storage '
        'Fees, Client(s) agree(s) to pay any laboratory fees and related charges, including, '
        'without limitation for blood analysis and other laboratory tests and evaluations.'
    ),
    Heading("7. RELEASE OF REPRODUCTIVE MATERIAL(S)"),
    Paragraph(
        "FCLAB shall release Reproductive Material(s) only to Client(s) or to others upon receipt "
        "of the form titled Release of Frozen Semen Specimens or Release of Frozen Embryo "
        "Authorization Form or Release of Frozen Oocytes signed by Client(s). Prior to the release "
        "of Reproductive Material(s) which have not been subject to laboratory evaluation, "
        "Client(s) (a) acknowledge that the Reproductive Material(s) have not been evaluated or "
        "screened for sexually transmitted disease or other diseases which would be disclosed or "
        "discovered by an evaluation or screening and (b) shall indemnify FCLAB from any lawsuit, "
        "cause of action, claim, liability, damage, judgment, settlement, including court costs "
        "and attorneys' which fees and expenses arising out of, associated with or pertaining to "
        "transmission of any diseases which would be disclosed or discovered through a laboratory "
        "evaluation or screening of Reproductive Material(s)."
    ),
    Heading("8. TERMINATION"),
    Paragraph(
        'This Agreement shall be terminated upon the happening of any one of the following events '
        '("Terminating Events"):'
    ),
    Paragraph("Release of all Client(s)' Reproductive Material(s) in accordance with the terms of Section 7;",
              lead="a)", indent=True),
    Paragraph("Written direction of Client(s) to FCLAB authorizing destruction of all Reproductive Material(s);",
              lead="b)", indent=True),
    Paragraph("Failure of Client(s) to pay any Storage Fees for a period of thirty (30) days after "
              "written notice from FCLAB to Client(s);", lead="c)", indent=True),
    Paragraph("Sixty (60) days after written notice given by either Client(s) or FCLAB to the other "
              "party terminating this Agreement.", lead="d)", indent=True),
    Paragraph(
        "Thirty (30) days after written notice given by FCLAB to Client(s) that FCLAB has "
        "determined, in its sole judgment and discretion that the Client(s)' Reproductive "
        "Material(s) are inappropriate for storage based on a laboratory evaluation, which "
        "evaluation may include, without limitation, the risk of transmitting disease. In the "
        "event of the termination of this Agreement pursuant to paragraph 8(e), FCLAB will refund "
        "the Storage Fee paid by the Client(s), however, any laboratory fees or related charges "
        "paid by Client will be nonrefundable.",
        lead="e)", indent=True,
    ),
    Paragraph(
        "Upon the occurrence of any Terminating Event, all obligations of FCLAB for storage of "
        "Client(s)' Reproductive Material(s) shall cease, and Client(s) shall make arrangement for "
        "release, use or other disposition of the Reproductive Material(s) within seven (7) days. "
        "Notwithstanding the foregoing, in the event of termination of this Agreement by reason of "
        "failure of Client to pay a Storage Fee pursuant to Section 8(c), FCLAB may, at its option, "
        "destroy all Client(s) Reproductive Material(s) in accordance with FCLAB's current policies "
        "and procedures."
    ),
)

PAGE_3 = (
    PageBreak(),
    Heading("9. LIMITATION OF LIABILITY"),
    Paragraph(
        "Client(s) and FCLAB acknowledge and agree that in the event of loss, damage or destruction "
        "of the Reproductive Material(s) for any reason whatsoever, Client(s) actual damages as a "
        "result thereof would be difficult to determine. Therefore, Client and FCLAB agree that the "
        "liability of FCLAB shall be limited to the amount paid by Client to FCLAB for the Storage "
        "Fee for the Storage Period within which the loss, damage or destruction occurred. However, "
        "FCLAB shall not be liable for any loss, damage or destruction of Reproductive Material(s) "
        "caused by occurrences beyond its control, including, without limitation, to acts of God, "
        "weather conditions, strikes or acts of any public authority."
    ),
    Heading("10. RELEASE AND INDEMNIFICATION"),
    Paragraph(
        "Client(s) has/have been advised and understand(s) that there are inherent risks in the "
        "process of freezing and thawing Reproductive Material(s), including, without limitation, "
        "damage to the Reproductive Material(s), reduced capacity for fertilization and reduced "
        "lifespan of the Reproductive Material(s) after thawing. In consideration of the foregoing "
        "and except for the payment set forth in Section 6 hereof, Client(s) for "
        "herself/himself/themselves and his/her/their heirs, descendants, spouses, executors, "
        "administrators, agents, representatives, successors and assigns, hereby releases and "
        f"forever discharges {FACILITY}, its officers, members, employees, agents and "
        "representatives, successors and assigns, from all actions, causes of action, obligations, "
        "costs, expenses, attorneys' fees, damages, losses, claims, liabilities, defenses, offsets "
        "or demands whatsoever arising out of or relating to, directly or indirectly, the "
        "collection, testing, freezing, storage release, loss, damage or destruction of "
        f"Reproductive Material(s). {FACILITY}, its officers, members, agents, employees, "
        "representatives, successors and assigns shall not be liable for any damages incurred with "
        "respect to the transfer of the frozen Reproductive Material(s) and the handling or "
        "supervision of the Reproductive Material(s) after they have left FCLAB's possession. It "
        "is the intention of the Client(s) and FCLAB that the foregoing shall be effective as a "
        "general release and as a bar to all lawsuits, actions, causes of actions obligations, "
        "costs, expenses, attorneys' fees, damages, losses, claims, liabilities, defenses, "
        "offsets, claims or demands whether known or unknown.",
        lead="a) RELEASE.",
    ),
    Paragraph(
        f"Client(s) shall indemnify, defend and hold harmlessly {FACILITY}, its shareholders, "
        "members, officers, directors, employees, agents, representatives, successors and assigns "
        "from lawsuits, actions, causes of action, liabilities, obligations, costs, expenses, "
        "attorneys' fees, damages, losses, claims, defenses, offsets or demands arising out of or "
        "relating to the collection, freezing, storage, release, loss damage or destruction of the "
        "Reproductive Material(s).",
        lead="b) INDEMNIFICATION.",
    ),
    Paragraph(
        f"Client(s) shall indemnify, defend and hold harmless {FACILITY}, its shareholders, "
        "members, officers, directors, employees, agents, representatives, successors and assignees "
        "from any lawsuit, action, cause of action, liability, obligation, cost, expense, "
        "attorneys' fees, damage, loss, claim, defense, offset or demand from a third party claim "
        "arising out of or relating to the collection, freezing, storage, release, loss, damage or "
        'destruction of Reproductive Material(s) ("Claim"). FCLAB will provide prompt written '
        "notice to Client(s) of any such Claim, upon receipt of written notice of such Claim and "
        "copies of any pleadings or documents received in connection therewith. Client(s) shall, "
        "at his/her/their own cost and expense, promptly defend, contest and otherwise protect "
        f"{FACILITY} against any such Claim with respect to which Client(s) has/have agreed to "
        f"indemnify, defend and hold harmless {FACILITY} through counsel which shall be",
        lead="c) INDEMNIFICATION OF THIRD PARTY ACTIONS OR CLAIMS.",
    ),
)

PAGE_4 = (
    PageBreak(),
    Paragraph(
        f"reasonably acceptable to {FACILITY}. Client(s) will have the right to compromise and "
        "settle, at his/her/their sole cost and expense, the Claim asserted seeking monetary "
        "damages, but shall not compromise or settle any Claim which seeks equitable or injunctive "
        f"relief against {FACILITY} without the express written consent of FCLAB, which consent "
        "may be granted or withheld in its sole and absolute discretion. Nonetheless, without "
        f"affecting Client(s) obligation under this paragraph (c), {FACILITY} may retain "
        "additional counsel at its sole expense. Client(s) will receive from FCLAB reasonable "
        f"cooperation in said defense. In the event, Client(s), after written notice from "
        f"{FACILITY}, fails to take timely action to defend the Claim, FCLAB shall have the right "
        "to defend the Claim by counsel of its own choosing, but at the cost and expense of "
        f"Client(s). In such event, {FACILITY} shall have the right to settle and compromise any "
        "such asserted liability at the cost and expense of the Client."
    ),
    Heading("11. NOTICES"),
    Paragraph(
        "Any notices required or permitted to be provided to a party hereunder shall be in writing "
        "and shall be effective as of the date personally delivered or sent by electronic "
        "facsimile or three (3) days after deposit in the United States mail, postage prepaid, "
        "certified or registered, addressed to the party at the address set forth beneath such "
        "party's signature, or at such other address as a party may request in writing be used "
        "for that purpose. Client(s) acknowledge(s) that it is Client(s) obligation to provide a "
        "correct updated mailing address for Client(s) at all times during the term hereof."
    ),
    Paragraph("To FCLAB: Fertility & Cryogenics Lab, 8635 Lemont Rd., Downers Grove, IL 60516, "
              "Phone Number: 630 427 0300"),
    Paragraph("To Client:"),
    Paragraph("Name: {client_name}", indent=True),
    Paragraph("Address: {address}", indent=True),
    Paragraph("City: {city} State: {state} ZIP: {zip_code}", indent=True),
    Paragraph("Tel: {phone} Cell: {cell}", indent=True),
    Paragraph("Fax: {fax} email: {email}", indent=True),
    Heading("12. DEATH OF CLIENT OR PARTNER OR DIVORCE"),
    OptionList(
        scenario=Scenario.DEATH_OF_CLIENT,
        intro="a) In the event of the death of the Client, I/we wish the Reproductive Material(s) to be:",
        options=(
            (Disposition.TRANSFER, "i. Transferred to the sole responsibility for the Partner "
                                   "(if applicable), to do with as he/she wishes"),
            (Disposition.DONATE_INFERTILE, f"ii. {_INFERTILE}"),
            (Disposition.DONATE_RESEARCH, f"iii. {_RESEARCH}"),
            (Disposition.DISCARD, f"iv. {_DISCARD}"),
        ),
    ),
    OptionList(
        scenario=Scenario.DEATH_OF_PARTNER,
        intro="b) In the event of the death of the Partner, we wish the Reproductive Material(s) to be:",
        options=(
            (Disposition.TRANSFER, "i. Transferred to the sole responsibility for the Client, "
                                   "to do with as he/she wishes"),
        ),
    ),
)

PAGE_5 = (
    PageBreak(),
    OptionList(scenario=Scenario.DEATH_OF_PARTNER, options=_standard_options(first=2)),
    OptionList(
        scenario=Scenario.DEATH_OF_BOTH,
        intro="c) If applicable, in the event of both the deaths of the Client and Partner, we wish "
              "the Reproductive Material(s) to be:",
        options=_standard_options(),
    ),
    OptionList(
        scenario=Scenario.DIVORCE,
        intro="d) If applicable, in the event of the Client and Partner's divorce or separation, we "
              "wish the Reproductive Material(s) to be:",
        options=_standard_options() + (
            (Disposition.PLACE_AT_DISPOSAL, "iv. Placed at the disposal of the Client or Partner in "
                                            "accordance with the provisions of the decree for divorce"),
        ),
    ),
    OptionList(
        scenario=Scenario.UNDECIDED,
        intro="e) In the event I/we notify FCLAB &/or {facility_name} in writing that I/we are unable "
              "to decide/agree on the future disposition of Reproductive Material(s) we wish the "
              "Reproductive Material(s) to be:",
        options=_standard_options(),
    ),
    OptionList(
        scenario=Scenario.FAILURE_TO_PAY,
        intro="f) I/We agree that in the event I/we fail to make one annual payment for storage, the "
              "Reproductive Material(s) will be:",
        options=_standard_options(),
    ),
    Paragraph(
        "I/We understand that the Reproductive Material(s) will be stored for a time not to exceed "
        "the normal reproductive life of the Client (age 50 for females; age 65 for males). At that "
        "time I/we wish the Reproductive Material(s) to be:",
        lead="g)",
    ),
)

PAGE_6 = (
    PageBreak(),
    OptionList(scenario=Scenario.AGE_LIMIT, options=_standard_options()),
    OptionList(
        scenario=Scenario.LOST_CONTACT,
        intro="h) In the event I/we are no longer receiving assisted reproductive technology treatment "
              "and we have failed to inform FCLAB &/or {facility_name} of our current address and "
              "telephone number for a period of one (1) year I/we wish the Reproductive Material(s) "
              "to be:",
        options=_standard_options(),
    ),
    Heading("13. MISCELLANEOUS PROVISIONS"),
    Paragraph(
        f"Client(s) understand(s) and agree(s) that {FACILITY} cannot and does not assume "
        "responsibility or liability for the safety or quality of Reproductive Material(s) that "
        "were not originally processed by FCLAB or have left FCLAB's control and have thereafter "
        "been returned. Client(s) understand(s) and agree(s) that in the above mentioned "
        "situations, the sole responsibility of FCLAB is limited to the storage of Reproductive "
        "Material(s), upon receipt, provided that Reproductive Material(s) are returned in proper "
        "frozen condition.",
        lead="a)",
    ),
    Paragraph(
        "This Agreement represents the entire agreement between parties concerning the subject "
        "matter hereof and there are no other understandings, agreements, or representations "
        "other than as herein set forth. This Agreement shall be binding upon the parties and "
        "their respective, spouses, executors, administrators, agents, representatives, "
        "successors and assigns. This Agreement shall be construed in accordance with the laws of "
        "the State of Illinois without regard to principles of its conflict of laws rule. If any "
        "provision of the Agreement is determined to be unenforceable, the remaining provisions "
        "hereof shall nevertheless be fully enforceable in accordance with their terms.",
        lead="b)",
    ),
    Paragraph(
        "The covenants and agreement contained in this Agreement shall survive its termination and "
        "shall remain in full force and effect.",
        lead="c)",
    ),
    Paragraph(
        "If any provision of this Agreement, or any portion of any provision shall be deemed "
        "invalid or unenforceable pursuant to a final determination of any court of competent "
        "jurisdiction or as a result of future legislative action, such determination or action "
        "shall be construed so as not to affect the validity or enforceability of any other "
        "portion hereof.",
        lead="d)",
    ),
    Paragraph(
        f"Client(s) and {FACILITY} agree to submit to personal jurisdiction and to waive an "
        "objection regarding venue in the County of DuPage and State of Illinois. Further, the "
        "parties agree that the prosecution or defense of any litigation or dispute arising out of "
        "this Agreement shall be litigated in the Circuit Court of DuPage County, Illinois which "
        "court the parties agree shall have sole and exclusive jurisdiction of the subject matter "
        "and parties.",
        lead="e)",
    ),
)

GUARDIAN_BLOCK = Conditional(when="is_minor", blocks=(
    Rule(),
    Paragraph("If the Client above is a minor, a parent or guardian of the minor must sign below:", bold=True),
    SignatureRow(
        label="Signature of Parent or Guardian (if applicable)",
        image=FieldId.GUARDIAN_SIGNATURE,
        name=FieldId.GUARDIAN_NAME,
        date=FieldId.GUARDIAN_DATE,
    ),
))

PAGE_7 = (
    PageBreak(),
    Paragraph(
        f"The undersigned, one of the members of the assisted reproductive medical staff of "
        f"{FACILITY}, by my signature, states that the foregoing agreement was read, discussed and "
        "signed in my presence."
    ),
    SignatureRow(label="Signature of Client", image=FieldId.CLIENT_SIGNATURE,
                 name=FieldId.CLIENT_NAME_PRINT, date=FieldId.CLIENT_DATE),
    SignatureRow(label="Signature of Partner (if applicable)", image=FieldId.PARTNER_SIGNATURE,
                 name=FieldId.PARTNER_NAME_PRINT, date=FieldId.PARTNER_DATE),
    GUARDIAN_BLOCK,
    Rule(),
    Paragraph(
        "The undersigned, one of the members of the assisted reproductive medical staff of ALPHA "
        "FERTILITY or FCLAB or {facility_name}, by my signature states that the foregoing consent "
        "was read, discussed, and signed in my presence. In the case of a Notarized Consent Form, "
        "the members of the assisted reproductive medical staff of ALPHA FERTILITY or "
        "{facility_name}, by my signature states that the foregoing consent was read and discussed."
    ),
    SignatureRow(label="Signature of FCLAB/{facility_name} staff", text=FieldId.STAFF_SIGNATURE,
                 name=FieldId.STAFF_NAME, date=FieldId.STAFF_DATE),
    Rule(),
    Heading("WITNESS:"),
    Paragraph(
        "By signing below, the Witness affirms that he/she knows the Client(s) and parent or "
        "guardian, if applicable, and that he/she was present and witnessed the Client(s) "
        "signatures and the parent's or guardian's signature, if applicable, on this document."
    ),
    SignatureRow(label="Witness", text=FieldId.WITNESS_SIGNATURE,
                 name=FieldId.WITNESS_NAME, date=FieldId.WITNESS_DATE),
)

IDENTITY_EXHIBIT = Conditional(when="has_id_document", blocks=(
    PageBreak(),
    Exhibit(
        title="Identity Verification Exhibit",
        image=FieldId.ID_DOCUMENT,
        caption="Government-issued identification supplied by {client_name}",
    ),
))

AGREEMENT_FLOW = FlowSchema(
    blocks=PAGE_1 + PAGE_2 + PAGE_3 + PAGE_4 + PAGE_5 + PAGE_6 + PAGE_7 + (IDENTITY_EXHIBIT,),
    version=SCHEMA_VERSION,
)

# Coordinates are PDF points from the bottom-left corner of each template page
AGREEMENT_OVERLAY = OverlaySchema(
    {
        # Page 1
        "client_name": {"page": 0, "x": 105, "y": 687},
        "client_dob": {"page": 0, "x": 320, "y": 687},
        "partner_name": {"page": 0, "x": 105, "y": 660},
        "partner_dob": {"page": 0, "x": 320, "y": 660},
        "material_embryo": {"page": 0, "x": 100, "y": 620, "kind": "check"},
        "material_sperm": {"page": 0, "x": 180, "y": 620, "kind": "check"},
        "material_oocytes": {"page": 0, "x": 240, "y": 620, "kind": "check"},
        "material_ovarian_tissue": {"page": 0, "x": 320, "y": 620, "kind": "check"},
        "material_endometrial_tissue": {"page": 0, "x": 430, "y": 620, "kind": "check"},
        "material_donor_embryo": {"page": 0, "x": 100, "y": 600, "kind": "check"},
        "material_donor_semen": {"page": 0, "x": 180, "y": 600, "kind": "check"},
        "material_donor_eggs": {"page": 0, "x": 240, "y": 600, "kind": "check"},
        "other_material": {"page": 0, "x": 480, "y": 600},
        "patient_of": {"page": 0, "x": 150, "y": 550},

        # Page 4 (notices)
        "address": {"page": 3, "x": 140, "y": 412},
        "city": {"page": 3, "x": 120, "y": 384},
        "state": {"page": 3, "x": 300, "y": 384},
        "zip_code": {"page": 3, "x": 420, "y": 384},
        "phone": {"page": 3, "x": 120, "y": 370},
        "cell": {"page": 3, "x": 320, "y": 370},
        "fax": {"page": 3, "x": 120, "y": 356},
        "email": {"page": 3, "x": 320, "y": 356},

        # Page 7 (signatures)
        "client_signature": {"page": 6, "x": 120, "y": 500, "width": 150, "height": 40, "kind": "image"},
        "client_name_print": {"page": 6, "x": 120, "y": 480},
        "client_date": {"page": 6, "x": 300, "y": 480},
        "partner_signature": {"page": 6, "x": 120, "y": 430, "width": 150, "height": 40, "kind": "image"},
        "partner_name_print": {"page": 6, "x": 120, "y": 410},
        "partner_date": {"page": 6, "x": 300, "y": 410},
        "guardian_signature": {"page": 6, "x": 120, "y": 360, "width": 150, "height": 40, "kind": "image"},
        "guardian_name": {"page": 6, "x": 120, "y": 340},
        "guardian_date": {"page": 6, "x": 300, "y": 340},
        "facility_name": {"page": 6, "x": 210, "y": 290, "kind": "heading"},
        "staff_signature": {"page": 6, "x": 120, "y": 250},
        "staff_name": {"page": 6, "x": 300, "y": 250},
        "staff_date": {"page": 6, "x": 480, "y": 250},
        "witness_signature": {"page": 6, "x": 120, "y": 150},
        "witness_name": {"page": 6, "x": 350, "y": 150},
        "witness_date": {"page": 6, "x": 500, "y": 150},
    },
    page_count=7,
    version=SCHEMA_VERSION,
)
