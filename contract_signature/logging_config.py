# contract_signature/logging_config.py
# configuration des logs, appelee une fois par create_app
import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone

EXTRA_FIELDS = ("route", "recipient", "role", "signature_id", "duration_ms")


class JSONFormatter(logging.Formatter):
    """Une ligne json par evenement, pour l hebergeur."""

    def format(self, record):
        entry = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    def format(self, record):
        ts = datetime.now().strftime("%H:%M:%S")
        line = f"{ts} [{record.levelname[0]}] {record.name}: {record.getMessage()}"
        if record.exc_info and record.exc_info[0]:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level="INFO", json_logs=False, log_folder=None):
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    root.handlers.clear()

    console = logging.StreamHandler()
    console.setFormatter(JSONFormatter() if json_logs else HumanFormatter())
    root.addHandler(console)

    # journal d audit des erreurs sur disque si un dossier est configure
    if log_folder:
        os.makedirs(log_folder, exist_ok=True)
        audit = logging.handlers.RotatingFileHandler(
            os.path.join(log_folder, "audit.log"), maxBytes=5_000_000, backupCount=5,
        )
        audit.setLevel(logging.WARNING)
        audit.setFormatter(JSONFormatter())
        root.addHandler(audit)

    for name in ("urllib3", "werkzeug", "PyPDF2", "reportlab"):
        logging.getLogger(name).setLevel(logging.WARNING)
