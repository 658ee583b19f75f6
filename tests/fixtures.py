ADMIN_EMAIL = "ada@example.com"
ADMIN_PASSWORD = "correct-horse-battery"

UNKNOWN_ID = "0b8e3f5c-6c47-4f4e-9a3e-1f2d3c4b5a69"


class FakeSMTPConfig:
    SMTP_HOST = "smtp.aithena.test"
    SMTP_PORT = 587
    SMTP_USER = "mailer@example.com"
    SMTP_PASS = "abcd efgh ijkl mnop"
    SMTP_SECURE = False
    SMTP_FROM = None
    CONTACT_EMAIL = "hello@example.com"
    SMTP_TIMEOUT_SECONDS = 15


class MissingSMTPConfig(FakeSMTPConfig):
    SMTP_HOST = None
    SMTP_PASS = None
