from pydantic import BaseModel


class CountryConfig(BaseModel):
    code: str
    name: str
    currency_code: str
    currency_symbol: str
    vat_rate: float
    vat_label: str
    tax_id_label: str
    tax_id_name: str


COUNTRIES = {
    "AE": CountryConfig(
        code="AE",
        name="United Arab Emirates",
        currency_code="AED",
        currency_symbol="AED",
        vat_rate=0.05,
        vat_label="VAT",
        tax_id_label="TRN",
        tax_id_name="Tax Registration Number",
    ),
    "IN": CountryConfig(
        code="IN",
        name="India",
        currency_code="INR",
        currency_symbol="₹",
        vat_rate=0.18,
        vat_label="GST",
        tax_id_label="GSTIN",
        tax_id_name="Goods and Services Tax Identification Number",
    ),
}


def get_country(code: str, default: str = "AE") -> CountryConfig:
    """Resolve a country code, falling back to the configured default"""
    return COUNTRIES.get((code or "").upper()) or COUNTRIES[default]
