class StateKeys:
    """Keys for data stored in ``st.session_state``."""

    LANG = "lang"
    ENGINE = "onboarding.engine"
    WIZARD = "onboarding.wizard"
    SUBMISSION_BANNER = "onboarding.submission_banner"
    SUBMITTED_PAYLOAD = "onboarding.submitted_payload"


class FieldKeys:
    """Canonical field names of the onboarding form."""

    # personal
    NAME = "name"
    EMAIL = "email"
    PHONE = "phone"
    NIF = "nif"
    DATE_OF_BIRTH = "date_of_birth"

    # fiscal address
    FISCAL_ADDRESS = "fiscal_address"
    FISCAL_POSTAL_CODE = "fiscal_postal_code"
    FISCAL_CITY = "fiscal_city"
    HAS_COMPANY = "has_company"

    # company
    COMPANY_NAME = "company_name"
    NIPC = "nipc"
    CAE = "cae"
    LEGAL_FORM = "legal_form"
    FOUNDING_DATE = "founding_date"

    # business activity
    BUSINESS_ACTIVITY = "business_activity"
    ESTIMATED_REVENUE = "estimated_revenue"
    MONTHLY_INVOICES = "monthly_invoices"
    NUMBER_EMPLOYEES = "number_employees"

    # fiscal regimes
    ACCOUNTING_REGIME = "accounting_regime"
    VAT_REGIME = "vat_regime"
    REPORT_FREQUENCY = "report_frequency"

    # credentials
    USERNAME = "username"
    PASSWORD = "password"
    CONFIRM_PASSWORD = "confirm_password"


FORM_FIELDS: tuple[str, ...] = (
    FieldKeys.NAME,
    FieldKeys.EMAIL,
    FieldKeys.PHONE,
    FieldKeys.NIF,
    FieldKeys.DATE_OF_BIRTH,
    FieldKeys.FISCAL_ADDRESS,
    FieldKeys.FISCAL_POSTAL_CODE,
    FieldKeys.FISCAL_CITY,
    FieldKeys.HAS_COMPANY,
    FieldKeys.COMPANY_NAME,
    FieldKeys.NIPC,
    FieldKeys.CAE,
    FieldKeys.LEGAL_FORM,
    FieldKeys.FOUNDING_DATE,
    FieldKeys.BUSINESS_ACTIVITY,
    FieldKeys.ESTIMATED_REVENUE,
    FieldKeys.MONTHLY_INVOICES,
    FieldKeys.NUMBER_EMPLOYEES,
    FieldKeys.ACCOUNTING_REGIME,
    FieldKeys.VAT_REGIME,
    FieldKeys.REPORT_FREQUENCY,
    FieldKeys.USERNAME,
    FieldKeys.PASSWORD,
    FieldKeys.CONFIRM_PASSWORD,
)
