# ==========================================
# ⚙️ CLINIC CONFIGURATION FILE
# ==========================================
# Edit this file to re-brand the agreement for another storage lab.

# --- BRANDING ---
APP_TITLE = "FCLAB Storage Agreement"  # Shows in browser tab
PAGE_ICON = "🧊"                       # Browser tab icon
CLINIC_NAME = "Fertility & Cryogenics Lab"
CLINIC_SHORT_NAME = "FCLAB"
TAGLINE = "Reproductive Material(s) Storage"

# --- CLINIC IDENTITY (printed in the header and the notices clause) ---
CLINIC_STREET = "8635 Lemont Rd."
CLINIC_CITY_LINE = "Downers Grove, IL 60516"
CLINIC_PHONE = "(630) 427 0300"
CLINIC_FAX = "(630) 427 0302"

# Printed wherever the client did not name another facility
DEFAULT_FACILITY_NAME = "Alpha Fertility"

# --- LOGIN SECURITY ---
LOGIN_HEADER = "Secure Client Portal"
ACCESS_CODES = ["FCLAB-ADMIN", "FCLAB-FRONTDESK", "TEST-CLIENT"]

# --- EMAIL COPY ---
EMAIL_SUBJECT = "Fertility Clinic - Reproductive Material Storage Agreement"
EMAIL_BODY = """Dear {client_name},

Please find attached your completed Reproductive Material Storage Agreement.

If you have any questions, please don't hesitate to contact us.

Best regards,
Fertility & Cryogenics Lab
Phone: (630) 427-0300"""

# --- LEGAL DISCLAIMERS ---
CONSENT_TEXT = "By clicking Submit, I agree to receive a signed copy of this agreement by email."
FINAL_SIGNATURE_TEXT = "By signing below, you attest that you have read the agreement and that the information provided is true and accurate."
