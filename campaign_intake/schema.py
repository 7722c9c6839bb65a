from datetime import date

from campaign_intake.types import CampaignRecord, CanonicalField

# Fixed target schema. Order matters: it is the column order of a well-formed sheet
# and the order fields are tried in when reconciling headers.
CANONICAL_FIELDS: tuple[CanonicalField, ...] = (
    CanonicalField(
        key="campaignName",
        display_name="Campaign Name",
        required=True,
        value_type="text",
        variant_names=("campaign name", "campaign_name", "campaignname", "campaign"),
    ),
    CanonicalField(
        key="influencersFollowers",
        display_name="Influencers Followers",
        required=True,
        value_type="text",
        variant_names=(
            "influencers followers", "influencers_followers", "influencersfollowers",
            "followers", "influencer count",
        ),
    ),
    CanonicalField(
        key="campaignType",
        display_name="Campaign Type",
        required=True,
        value_type="single-select",
        allowed_values=(
            "Brand Collaboration", "Product Launch", "Event Promotion", "Content Creation", "Other",
        ),
        variant_names=("campaign type", "campaign_type", "campaigntype", "type"),
    ),
    CanonicalField(
        key="startDate",
        display_name="Start Date",
        required=True,
        value_type="date",
        variant_names=("start date", "start_date", "startdate", "start", "campaign start"),
    ),
    CanonicalField(
        key="brandName",
        display_name="Brand Name",
        required=True,
        value_type="text",
        variant_names=("brand name", "brand_name", "brandname", "brand"),
    ),
    CanonicalField(
        key="endDate",
        display_name="End Date",
        required=True,
        value_type="date",
        variant_names=("end date", "end_date", "enddate", "end", "campaign end"),
    ),
    CanonicalField(
        key="niche",
        display_name="Niche",
        required=True,
        value_type="text",
        variant_names=("niche", "category", "industry"),
    ),
    CanonicalField(
        key="priority",
        display_name="Priority",
        required=True,
        value_type="single-select",
        allowed_values=("High", "Medium", "Low"),
        variant_names=("priority", "urgency", "level"),
    ),
    CanonicalField(
        key="budget",
        display_name="Budget",
        required=True,
        value_type="number",
        variant_names=("budget", "amount", "cost", "price"),
    ),
    CanonicalField(
        key="notes",
        display_name="Notes",
        required=False,
        value_type="multi-line text",
        variant_names=("notes", "comments", "description", "additional info"),
    ),
    CanonicalField(
        key="deliverables",
        display_name="Deliverables",
        required=True,
        value_type="multi-line text",
        variant_names=("deliverables", "requirements", "scope", "what to deliver"),
    ),
    CanonicalField(
        key="platforms",
        display_name="Platforms",
        required=True,
        value_type="multi-select",
        allowed_values=("Instagram", "Facebook", "YouTube"),
        variant_names=("platforms", "social media", "channels", "platform"),
    ),
    CanonicalField(
        key="attachment",
        display_name="Attachment",
        required=False,
        value_type="file-reference",
        variant_names=("attachment", "file", "document", "upload"),
    ),
    CanonicalField(
        key="timestamp",
        display_name="Submission Date",
        required=False,
        value_type="date",
        variant_names=(
            "submission date", "submission_date", "submissiondate", "timestamp", "created",
            "date submitted",
        ),
    ),
)

# Exact header texts of a well-formed sheet, in column order
EXPECTED_HEADERS: tuple[str, ...] = tuple(f.display_name for f in CANONICAL_FIELDS)

_BY_KEY = {f.key: f for f in CANONICAL_FIELDS}
_BY_DISPLAY_NAME = {f.display_name: f for f in CANONICAL_FIELDS}


def field_by_key(key: str) -> CanonicalField | None:
    return _BY_KEY.get(key)


def field_by_display_name(display_name: str) -> CanonicalField | None:
    """Reverse lookup: exact display name -> canonical field."""
    return _BY_DISPLAY_NAME.get(display_name)


def required_fields() -> tuple[CanonicalField, ...]:
    return tuple(f for f in CANONICAL_FIELDS if f.required)


# ---------- sheet template helpers ----------

def generate_csv_header() -> str:
    """Header line for a new sheet: every display name, comma-separated."""
    return ",".join(EXPECTED_HEADERS)


def sample_record(today: date | None = None) -> CampaignRecord:
    """
    A filled-in example row keyed by display name.
    `today` fixes the Submission Date (defaults to the current date).
    """
    submitted = (today or date.today()).strftime("%m/%d/%Y")
    return {
        "Campaign Name": "Sample Campaign",
        "Influencers Followers": "10K-50K",
        "Campaign Type": "Brand Collaboration",
        "Start Date": "12/01/2024",
        "Brand Name": "Sample Brand",
        "End Date": "12/31/2024",
        "Niche": "Fashion",
        "Priority": "High",
        "Budget": "5000",
        "Notes": "Sample campaign notes",
        "Deliverables": "3 Instagram posts, 2 Stories",
        "Platforms": "Instagram, Facebook",
        "Attachment": "campaign_brief.pdf",
        "Submission Date": submitted,
    }


def generate_template_csv(today: date | None = None) -> str:
    """Header line plus one sample row; values containing commas are quoted."""
    sample = sample_record(today)
    cells = []
    for name in EXPECTED_HEADERS:
        value = sample[name]
        cells.append(f'"{value}"' if "," in value else value)
    return f"{generate_csv_header()}\n{','.join(cells)}"
