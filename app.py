import io
from datetime import date

import streamlit as st
from PIL import Image
from streamlit_drawable_canvas import st_canvas

# --- 🔗 IMPORT CLIENT SETTINGS ---
import client_settings as cs
from answers import MATERIALS, AnswerModel, format_date
from assets import S3AssetResolver
from config import ServiceConfig
from dispatcher import SmtpDelivery
from errors import ConfigError, GenerationFailure
from logger import configure_logging, load_logs
from pipeline import submit_agreement

st.set_page_config(page_title=cs.APP_TITLE, page_icon=cs.PAGE_ICON)

try:
    config = ServiceConfig.from_secrets(st.secrets)
except ConfigError as e:
    st.error(f"Configuration problem: {e}")
    st.stop()
configure_logging(config.log_level)

# Intake questions per disposition scenario: (title, wire path, [(wire option, label)])
_STANDARD = [
    ("donateToInfertile", "Donated to infertile couples"),
    ("donateToResearch", "Donated for medical research"),
    ("discard", "Discarded"),
]
DISPOSITION_QUESTIONS = [
    ("In the event of the Client's death", ("deathOptions", "client"),
     [("transferToPartner", "Transferred to the Partner")] + _STANDARD),
    ("In the event of the Partner's death", ("deathOptions", "partner"),
     [("transferToClient", "Transferred to the Client")] + _STANDARD),
    ("In the event of both deaths", ("deathOptions", "both"), _STANDARD),
    ("In the event of divorce or dissolution", ("divorceOptions",),
     _STANDARD + [("placeAtDisposal", "Placed at the disposal of the Client or Partner per court order")]),
    ("If we cannot agree on a disposition", ("unableToDecideOptions",), _STANDARD),
    ("If storage fees are not paid", ("failToPayOptions",), _STANDARD),
    ("When the storage age limit is reached", ("storageTimeOptions",), _STANDARD),
    ("If the lab can no longer reach us", ("noLongerReceivingOptions",), _STANDARD),
]

STAGES = ["Your Details", "Materials", "Dispositions", "Identity", "Review", "Sign"]


def canvas_png(result):
    """PNG bytes from a drawable canvas, or None when nothing was drawn."""
    if result is None or result.image_data is None:
        return None
    data = result.image_data.astype('uint8')
    if not data[:, :, 3].any():
        return None
    buffer = io.BytesIO()
    Image.fromarray(data, 'RGBA').save(buffer, format="PNG")
    return buffer.getvalue()


def set_option(payload, path, option, value):
    group = payload
    for key in path:
        group = group.setdefault(key, {})
    group[option] = value


def get_option(payload, path, option):
    group = payload
    for key in path:
        group = group.get(key, {})
    return group.get(option) is True


# --- LOGIN GATE ---
if "authenticated" not in st.session_state: st.session_state.authenticated = False
if not st.session_state.authenticated:
    st.title(f"🔒 {cs.LOGIN_HEADER}")
    st.caption(cs.TAGLINE)
    code = st.text_input("Access Code", type="password")
    if st.button("Enter"):
        if code in cs.ACCESS_CODES:
            st.session_state.authenticated = True
            st.rerun()
        else: st.error("Invalid Access Code")
    st.stop()

# --- STATE INITIALIZATION ---
if "form_data" not in st.session_state: st.session_state.form_data = {}
if "idx" not in st.session_state: st.session_state.idx = -1
form_data = st.session_state.form_data

# --- SIDEBAR ---
with st.sidebar:
    st.header(cs.CLINIC_NAME)
    st.caption(cs.TAGLINE)

    if st.session_state.idx >= 0:
        safe_idx = min(st.session_state.idx, len(STAGES))
        progress_value = safe_idx / len(STAGES)
        st.progress(progress_value, text=f"Progress: {int(progress_value*100)}%")

    with st.expander("💼 Admin Dashboard"):
        if st.text_input("Admin Pass", type="password") == st.secrets.get("ADMIN_PASS", "admin"):
            st.caption(f"Renderer: {config.renderer}")
            st.dataframe(load_logs(config.log_file))

# ==========================================
# STAGE -1: WELCOME SCREEN
# ==========================================
if st.session_state.idx == -1:
    st.title(f"👋 Welcome to {cs.CLINIC_NAME}")
    st.info("You are about to complete the Reproductive Material(s) Storage Agreement.")

    st.markdown("""
    ### 📝 What to Expect:
    1. **Tell us who you are** and how to reach you.
    2. **Choose the materials** stored with the lab.
    3. **Decide what happens** to them in each situation.
    4. **Sign digitally**; a copy of the agreement is emailed to you.
    """)

    if st.button("🚀 Start Agreement"):
        st.session_state.idx = 0
        st.rerun()

# ==========================================
# STAGE 0: DETAILS
# ==========================================
elif st.session_state.idx == 0:
    st.title("🧾 Your Details")
    with st.form(key="details"):
        c1, c2 = st.columns(2)
        client_name = c1.text_input("Client Name", value=form_data.get("clientName", ""))
        client_dob = c2.date_input("Client Date of Birth", value=form_data.get("clientDOB"),
                                   min_value=date(1900, 1, 1), max_value=date.today())
        partner_name = c1.text_input("Partner Name (if applicable)", value=form_data.get("partnerName", ""))
        partner_dob = c2.date_input("Partner Date of Birth", value=form_data.get("partnerDOB"),
                                    min_value=date(1900, 1, 1), max_value=date.today())
        email = st.text_input("Email", value=form_data.get("clientEmail", ""))
        address = st.text_input("Address", value=form_data.get("clientAddress", ""))
        c3, c4, c5 = st.columns([3, 1, 2])
        city = c3.text_input("City", value=form_data.get("clientCity", ""))
        state = c4.text_input("State", value=form_data.get("clientState", ""))
        zip_code = c5.text_input("ZIP", value=form_data.get("clientZIP", ""))
        c6, c7, c8 = st.columns(3)
        phone = c6.text_input("Tel", value=form_data.get("clientTel", ""))
        cell = c7.text_input("Cell", value=form_data.get("clientCell", ""))
        fax = c8.text_input("Fax", value=form_data.get("clientFax", ""))
        patient_of = st.text_input("Patient of (physician)", value=form_data.get("patientOf", ""))
        facility = st.text_input("Facility", value=form_data.get("facilityName", cs.DEFAULT_FACILITY_NAME))

        if st.form_submit_button("Next ➡️"):
            if client_name.strip() and email.strip():
                form_data.update({
                    "clientName": client_name, "clientDOB": client_dob, "partnerName": partner_name,
                    "partnerDOB": partner_dob, "clientEmail": email, "clientAddress": address,
                    "clientCity": city, "clientState": state, "clientZIP": zip_code,
                    "clientTel": phone, "clientCell": cell, "clientFax": fax,
                    "patientOf": patient_of, "facilityName": facility,
                })
                st.session_state.idx += 1
                st.rerun()
            else:
                st.warning("Client name and email are required to continue.")

# ==========================================
# STAGE 1: MATERIALS
# ==========================================
elif st.session_state.idx == 1:
    st.title("🧊 Materials in Storage")
    with st.form(key="materials"):
        picked = st.multiselect("Reproductive material(s)", MATERIALS,
                                default=form_data.get("reproductiveMaterials", []))
        other = st.text_input("Other", value=form_data.get("otherMaterial", ""))
        c1, c2 = st.columns([1, 5])
        back = c1.form_submit_button("⬅️ Back")
        submitted = c2.form_submit_button("Next ➡️")
        if back or submitted:
            form_data["reproductiveMaterials"] = picked
            form_data["otherMaterial"] = other
            st.session_state.idx += 1 if submitted else -1
            st.rerun()

# ==========================================
# STAGE 2: DISPOSITIONS
# ==========================================
elif st.session_state.idx == 2:
    st.title("📜 Disposition Choices")
    st.write("Tick every option you agree to for each situation.")
    with st.form(key="dispositions"):
        ticks = []
        for n, (title, path, options) in enumerate(DISPOSITION_QUESTIONS):
            st.markdown(f"**{title}**")
            for option, label in options:
                value = st.checkbox(label, value=get_option(form_data, path, option), key=f"d_{n}_{option}")
                ticks.append((path, option, value))
        c1, c2 = st.columns([1, 5])
        back = c1.form_submit_button("⬅️ Back")
        submitted = c2.form_submit_button("Next ➡️")
        if back or submitted:
            for path, option, value in ticks:
                set_option(form_data, path, option, value)
            st.session_state.idx += 1 if submitted else -1
            st.rerun()

# ==========================================
# STAGE 3: IDENTITY
# ==========================================
elif st.session_state.idx == 3:
    st.title("🆔 Identity")
    gov_id = st.file_uploader("Upload a photo ID (optional)", type=['jpg', 'png', 'jpeg'])
    if gov_id is not None:
        form_data["idDocument"] = gov_id.getvalue()
    if form_data.get("idDocument"):
        st.image(form_data["idDocument"], width=240)

    is_minor = st.checkbox("The client is under 18", value=form_data.get("isMinor", False))
    form_data["isMinor"] = is_minor
    if is_minor:
        form_data["parentGuardianName"] = st.text_input("Parent / Guardian Name",
                                                        value=form_data.get("parentGuardianName", ""))

    c1, c2 = st.columns(2)
    if c1.button("⬅️ Back"):
        st.session_state.idx -= 1
        st.rerun()
    if c2.button("Continue to Review ➡️"):
        if is_minor and not form_data.get("parentGuardianName", "").strip():
            st.warning("A parent or guardian must be named for a minor.")
        else:
            st.session_state.idx += 1
            st.rerun()

# ==========================================
# STAGE 4: REVIEW ANSWERS
# ==========================================
elif st.session_state.idx == 4:
    st.title("📋 Review Your Info")
    st.write("Please verify that all information below is correct.")
    answers = AnswerModel.from_form(form_data)

    st.text_input("Client", value=answers.client_name, disabled=True)
    st.text_input("Date of Birth", value=format_date(answers.client_dob), disabled=True)
    st.text_input("Email", value=answers.email, disabled=True)
    if answers.partner_name:
        st.text_input("Partner", value=answers.partner_name, disabled=True)
    st.text_input("Materials", value=", ".join(m for m in MATERIALS if answers.material_selected(m)), disabled=True)
    if answers.other_text:
        st.text_input("Other material", value=answers.other_text, disabled=True)
    for title, path, options in DISPOSITION_QUESTIONS:
        chosen = [label for option, label in options if get_option(form_data, path, option)]
        st.text_input(title, value="; ".join(chosen) or "(none)", disabled=True)
    if answers.needs_guardian:
        st.text_input("Parent / Guardian", value=answers.guardian_name, disabled=True)

    c1, c2 = st.columns(2)
    if c1.button("✏️ Revise Answers"):
        st.session_state.idx = 0
        st.rerun()

    if c2.button("✅ Information is Correct"):
        st.session_state.idx += 1
        st.rerun()

# ==========================================
# STAGE 5: SIGN & SUBMIT
# ==========================================
elif st.session_state.idx == 5:
    st.title("✍️ Final Signature")
    st.write(cs.FINAL_SIGNATURE_TEXT)

    st.markdown("**Client signature**")
    sig = st_canvas(stroke_width=2, height=150, key="sig")
    partner_sig = None
    if form_data.get("partnerName", "").strip():
        st.markdown("**Partner signature**")
        partner_sig = st_canvas(stroke_width=2, height=150, key="partner_sig")
    guardian_sig = None
    if form_data.get("isMinor"):
        st.markdown("**Parent / Guardian signature**")
        guardian_sig = st_canvas(stroke_width=2, height=150, key="guardian_sig")
    st.caption(cs.CONSENT_TEXT)

    if st.button("🚀 Finalize & Submit Agreement"):
        client_png = canvas_png(sig)
        if client_png is None:
            st.warning("Please sign in the box above.")
            st.stop()

        today = date.today()
        payload = dict(form_data)
        payload["clientSignature"] = client_png
        payload["clientSignatureDate"] = today
        partner_png = canvas_png(partner_sig)
        if partner_png is not None:
            payload["partnerSignature"] = partner_png
            payload["partnerSignatureDate"] = today
        guardian_png = canvas_png(guardian_sig)
        if guardian_png is not None:
            payload["parentGuardianSignature"] = guardian_png
            payload["parentGuardianSignatureDate"] = today
        answers = AnswerModel.from_form(payload, today=today)

        with st.spinner("Generating and sending your agreement..."):
            resolver = S3AssetResolver(config) if config.has_s3 else None
            try:
                result = submit_agreement(answers, config, resolver, SmtpDelivery(config))
            except GenerationFailure as failure:
                st.error(failure.message)
                if failure.cause is not None:
                    st.caption(str(failure.cause))
                st.stop()

        st.session_state.result = result
        st.session_state.idx += 1
        st.rerun()

# ==========================================
# STAGE 6: DONE
# ==========================================
else:
    result = st.session_state.result
    st.balloons()
    st.success(f"✅ Agreement sent to {result.receipt.recipient}.")
    st.download_button("⬇️ Download a copy", data=result.agreement.pdf,
                       file_name=result.agreement.filename, mime="application/pdf")
    if st.button("Start a new agreement"):
        st.session_state.clear()
        st.rerun()
