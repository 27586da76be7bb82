import os

_DEFAULT_SQLITE = "sqlite:///local.db"


def build_db_uri() -> str:
    conn_name = os.environ.get("CLOUD_SQL_CONNECTION_NAME")
    db_name = os.environ.get("DB_NAME")
    db_user = os.environ.get("DB_USER")
    db_pass = os.environ.get("DB_PASS")

    # App Engine (Cloud SQL unix socket)
    if conn_name and db_name and db_user and db_pass:
        return (
            f"postgresql+psycopg2://{db_user}:{db_pass}@/{db_name}"
            f"?host=/cloudsql/{conn_name}"
        )

    return os.environ.get("DATABASE_URL") or _DEFAULT_SQLITE


class Config:
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-change-me")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SQLALCHEMY_DATABASE_URI = build_db_uri()

    # Internal pass service. Leave PASS_SERVICE_URL unset to issue passes
    # against the local ticket_passes table.
    PASS_SERVICE_URL = os.environ.get("PASS_SERVICE_URL") or None
    PASS_SERVICE_SECRET = os.environ.get("PASS_SERVICE_SECRET", "")
    PASS_SERVICE_TIMEOUT = float(os.environ.get("PASS_SERVICE_TIMEOUT", "10"))
    PASS_ID_PREFIX = os.environ.get("PASS_ID_PREFIX", "p_")

    QR_ERROR_CORRECTION = os.environ.get("QR_ERROR_CORRECTION", "M")
    QR_BOX_SIZE = int(os.environ.get("QR_BOX_SIZE", "10"))
    QR_BORDER = int(os.environ.get("QR_BORDER", "4"))
