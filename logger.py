import logging
import os
from datetime import datetime

import pandas as pd

LOG_COLUMNS = ["Timestamp", "Client", "Form", "Renderer", "Status", "Detail"]

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def configure_logging(level="INFO"):
    """Operational logs (asset, cleanup and rendering problems) go to stderr."""
    root = logging.getLogger()
    if not any(getattr(h, "_agreement_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._agreement_handler = True
        root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))


def log_submission(log_file, client_name, form_name, renderer, status, detail=""):
    """
    Appends one submission outcome to the CSV log.
    """
    new_entry = {
        "Timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "Client": client_name,
        "Form": form_name,
        "Renderer": renderer,
        "Status": status,
        "Detail": detail,
    }

    file_exists = os.path.isfile(log_file)

    df = pd.DataFrame([new_entry], columns=LOG_COLUMNS)
    df.to_csv(log_file, mode='a', header=not file_exists, index=False)


def load_logs(log_file):
    """
    Reads the log file for the Dashboard.
    """
    if os.path.exists(log_file):
        try:
            return pd.read_csv(log_file)
        except (pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            logging.getLogger(__name__).warning("Submission log %s is unreadable: %s", log_file, e)
    return pd.DataFrame(columns=LOG_COLUMNS)
