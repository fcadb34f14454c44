"""
Built-in upload schemas.

Section order and field order inside each section define the column order of
generated templates and of parsed uploads.
"""

from __future__ import annotations

from bulk_import.schema import FieldType, SchemaRegistry, TemplateField, TemplateSection, TemplateType

SIGNED_DECIMAL_PATTERN = r"^-?\d{1,3}(\.\d+)?$"
IMEI_PATTERN = r"^[0-9]{15}$"


DEVICE_SECTIONS = (
    TemplateSection("Basic Info", (
        TemplateField("device_name", "Device Name", FieldType.TEXT, max_length=100,
                      example="iPhone 13 Pro", description="Common name for the device"),
        TemplateField("device_type", "Device Type", FieldType.DROPDOWN, required=True,
                      options=("phone", "laptop", "tablet", "smartwatch", "headphones", "camera", "gaming_console", "other"),
                      example="phone", description="Category of device"),
        TemplateField("brand", "Brand", FieldType.TEXT, required=True, max_length=50,
                      example="Apple", description="Manufacturer brand name"),
        TemplateField("model", "Model", FieldType.TEXT, required=True, max_length=100,
                      example="A2483", description="Model number or name"),
    )),
    TemplateSection("Identifiers", (
        TemplateField("serial_number", "Serial Number", FieldType.TEXT, required=True, max_length=50,
                      pattern=r"^[A-Z0-9]+$", example="ABC123XYZ456",
                      description="Unique serial number (must be unique within the upload)"),
        TemplateField("imei", "IMEI", FieldType.TEXT, pattern=IMEI_PATTERN,
                      example="123456789012345", description="15-digit IMEI for mobile devices"),
        TemplateField("mac_address", "MAC Address", FieldType.TEXT,
                      pattern=r"^([0-9A-Fa-f]{2}[:-]){5}([0-9A-Fa-f]{2})$",
                      example="AA:BB:CC:DD:EE:FF", description="MAC address for network devices"),
    )),
    TemplateSection("Purchase Details", (
        TemplateField("purchase_date", "Purchase Date", FieldType.DATE,
                      example="2024-01-15", description="Format: YYYY-MM-DD (must not be in the future)"),
        TemplateField("purchase_price", "Purchase Price", FieldType.NUMBER,
                      example="1299.99", description="Purchase price (numbers only, no symbols)"),
        TemplateField("purchase_location", "Purchase Location", FieldType.TEXT, max_length=200,
                      example="Apple Store, Sandton City", description="Where the device was purchased"),
        TemplateField("receipt_url", "Receipt URL", FieldType.URL,
                      example="https://example.com/receipt.pdf", description="Link to the receipt or invoice"),
    )),
    TemplateSection("Physical Specs", (
        TemplateField("color", "Color", FieldType.TEXT, max_length=50, example="Graphite"),
        TemplateField("storage_capacity", "Storage Capacity", FieldType.TEXT,
                      example="256GB", description="Storage size (e.g. 256GB, 1TB)"),
        TemplateField("ram", "RAM", FieldType.TEXT, example="8GB", description="RAM size (e.g. 8GB, 16GB)"),
        TemplateField("condition", "Condition", FieldType.DROPDOWN,
                      options=("new", "like-new", "excellent", "good", "fair", "poor"),
                      example="excellent", description="Current device condition"),
    )),
    TemplateSection("Warranty & Insurance", (
        TemplateField("warranty_status", "Warranty Status", FieldType.DROPDOWN,
                      options=("active", "expired", "none"), example="active"),
        TemplateField("warranty_expiry", "Warranty Expiry Date", FieldType.DATE,
                      example="2025-12-31", description="Format: YYYY-MM-DD"),
        TemplateField("warranty_provider", "Warranty Provider", FieldType.TEXT, max_length=100,
                      example="Apple Inc."),
        TemplateField("insurance_policy_id", "Insurance Policy ID", FieldType.TEXT, max_length=100,
                      example="INS-2024-12345"),
        TemplateField("insurer_name", "Insurance Company", FieldType.TEXT, max_length=100,
                      example="Santam Insurance"),
    )),
    TemplateSection("Media", (
        TemplateField("device_photos", "Device Photos URLs", FieldType.TEXT,
                      example="https://example.com/photo1.jpg, https://example.com/photo2.jpg",
                      description="Comma-separated list of photo URLs"),
    )),
    TemplateSection("Additional", (
        TemplateField("notes", "Notes", FieldType.TEXT, max_length=500,
                      example="Device has minor scratch on back cover"),
        TemplateField("tags", "Tags", FieldType.TEXT, example="premium, flagship, 5g",
                      description="Comma-separated tags"),
    )),
)

MARKETPLACE_SECTIONS = (
    TemplateSection("Basic Info", (
        TemplateField("title", "Listing Title", FieldType.TEXT, required=True, max_length=200,
                      example="iPhone 13 Pro 256GB Graphite - Excellent Condition"),
        TemplateField("description", "Description", FieldType.TEXT, required=True, max_length=2000,
                      example="Barely used iPhone 13 Pro in excellent condition. No scratches, all accessories included."),
        TemplateField("price", "Price", FieldType.NUMBER, required=True,
                      example="15999.00", description="Selling price (numbers only)"),
        TemplateField("category", "Category", FieldType.DROPDOWN, required=True,
                      options=("phones", "laptops", "tablets", "smartwatches", "headphones", "cameras", "gaming", "accessories"),
                      example="phones"),
    )),
    TemplateSection("Product Details", (
        TemplateField("brand", "Brand", FieldType.TEXT, required=True, max_length=50, example="Apple"),
        TemplateField("model", "Model", FieldType.TEXT, required=True, max_length=100, example="iPhone 13 Pro"),
        TemplateField("condition", "Condition", FieldType.DROPDOWN, required=True,
                      options=("new", "like-new", "excellent", "good", "fair"), example="excellent"),
        TemplateField("storage", "Storage", FieldType.TEXT, example="256GB"),
        TemplateField("color", "Color", FieldType.TEXT, example="Graphite"),
    )),
    TemplateSection("Pricing & Delivery", (
        TemplateField("warranty_months", "Warranty (Months)", FieldType.NUMBER,
                      example="6", description="Warranty period in months"),
        TemplateField("shipping_options", "Shipping Options", FieldType.DROPDOWN,
                      options=("meetup", "courier", "collection", "all"), example="all"),
        TemplateField("photos_url", "Product Photos", FieldType.TEXT,
                      example="https://example.com/img1.jpg, https://example.com/img2.jpg",
                      description="Comma-separated photo URLs"),
    )),
)

LOST_REPORT_SECTIONS = (
    TemplateSection("Report Details", (
        TemplateField("report_type", "Report Type", FieldType.DROPDOWN, required=True,
                      options=("lost", "stolen"), example="lost"),
        TemplateField("device_category", "Device Category", FieldType.DROPDOWN, required=True,
                      options=("phone", "laptop", "tablet", "smartwatch", "camera", "other"), example="phone"),
        TemplateField("device_model", "Device Model", FieldType.TEXT, required=True, max_length=100,
                      example="iPhone 13 Pro"),
        TemplateField("serial_number", "Serial Number", FieldType.TEXT, max_length=50,
                      example="ABC123XYZ456", description="Device serial number if known"),
    )),
    TemplateSection("Incident Information", (
        TemplateField("incident_date", "Incident Date", FieldType.DATE, required=True,
                      example="2024-10-15", description="Date the device was lost or stolen (YYYY-MM-DD)"),
        TemplateField("location_address", "Location Address", FieldType.TEXT, required=True, max_length=200,
                      example="Sandton City Mall, Johannesburg"),
        TemplateField("location_lat", "Latitude", FieldType.TEXT, pattern=SIGNED_DECIMAL_PATTERN,
                      example="-26.1076", description="GPS latitude (optional)"),
        TemplateField("location_lng", "Longitude", FieldType.TEXT, pattern=SIGNED_DECIMAL_PATTERN,
                      example="28.0567", description="GPS longitude (optional)"),
    )),
    TemplateSection("Contact & Reward", (
        TemplateField("reward_amount", "Reward Amount", FieldType.NUMBER, example="5000",
                      description="Reward amount in ZAR"),
        TemplateField("contact_phone", "Contact Phone", FieldType.PHONE, required=True,
                      example="+27821234567"),
        TemplateField("photos_url", "Device Photos", FieldType.TEXT,
                      example="https://example.com/device.jpg", description="Comma-separated photo URLs"),
    )),
)

FOUND_REPORT_SECTIONS = (
    TemplateSection("Found Item Details", (
        TemplateField("device_category", "Device Category", FieldType.DROPDOWN, required=True,
                      options=("phone", "laptop", "tablet", "smartwatch", "camera", "other"), example="phone"),
        TemplateField("device_model", "Device Model", FieldType.TEXT, required=True, max_length=100,
                      example="Galaxy S22"),
        TemplateField("serial_number", "Serial Number", FieldType.TEXT, max_length=50,
                      example="R58N91XYZ", description="Serial number if visible"),
        TemplateField("device_color", "Device Color", FieldType.TEXT, max_length=50, example="Phantom Black"),
    )),
    TemplateSection("Discovery", (
        TemplateField("found_date", "Found Date", FieldType.DATE, required=True,
                      example="2025-03-02", description="Date the device was found (YYYY-MM-DD)"),
        TemplateField("found_location", "Found Location", FieldType.TEXT, required=True, max_length=200,
                      example="Gautrain Station, Rosebank"),
        TemplateField("location_lat", "Latitude", FieldType.TEXT, pattern=SIGNED_DECIMAL_PATTERN,
                      example="-26.1452"),
        TemplateField("location_lng", "Longitude", FieldType.TEXT, pattern=SIGNED_DECIMAL_PATTERN,
                      example="28.0436"),
    )),
    TemplateSection("Handover", (
        TemplateField("handed_to", "Handed To", FieldType.DROPDOWN, required=True,
                      options=("police_station", "partner_store", "kept_by_finder", "other"),
                      example="police_station"),
        TemplateField("reference_number", "Reference Number", FieldType.TEXT, max_length=50,
                      example="CAS 123/03/2025", description="Police case or store reference"),
        TemplateField("finder_name", "Finder Name", FieldType.TEXT, max_length=100, example="Sipho Dlamini"),
        TemplateField("finder_email", "Finder Email", FieldType.EMAIL, example="sipho@example.com"),
        TemplateField("finder_phone", "Finder Phone", FieldType.PHONE, required=True, example="+27831234567"),
    )),
)

REPAIR_LOG_SECTIONS = (
    TemplateSection("Job", (
        TemplateField("job_number", "Job Number", FieldType.TEXT, required=True, max_length=30,
                      pattern=r"^[A-Z0-9-]+$", example="RJ-2025-00042",
                      description="Workshop job card number (must be unique within the upload)"),
        TemplateField("repair_date", "Repair Date", FieldType.DATE, required=True, example="2025-02-11"),
        TemplateField("status", "Status", FieldType.DROPDOWN, required=True,
                      options=("received", "in_progress", "completed", "returned", "unrepairable"),
                      example="completed"),
    )),
    TemplateSection("Device", (
        TemplateField("serial_number", "Serial Number", FieldType.TEXT, required=True, max_length=50,
                      example="ABC123XYZ456"),
        TemplateField("imei", "IMEI", FieldType.TEXT, pattern=IMEI_PATTERN, example="356789012345678"),
        TemplateField("device_model", "Device Model", FieldType.TEXT, required=True, max_length=100,
                      example="iPhone 12"),
    )),
    TemplateSection("Work Performed", (
        TemplateField("fault_description", "Fault Description", FieldType.TEXT, required=True, max_length=500,
                      example="Cracked screen, touch unresponsive in lower half"),
        TemplateField("parts_replaced", "Parts Replaced", FieldType.TEXT, max_length=300,
                      example="Display assembly, adhesive kit"),
        TemplateField("repair_cost", "Repair Cost", FieldType.NUMBER, example="2450.00"),
        TemplateField("technician_name", "Technician Name", FieldType.TEXT, max_length=100, example="Lerato Mokoena"),
    )),
    TemplateSection("Workshop", (
        TemplateField("shop_name", "Shop Name", FieldType.TEXT, required=True, max_length=100,
                      example="FixIt Braamfontein"),
        TemplateField("shop_email", "Shop Email", FieldType.EMAIL, example="jobs@fixit.example.com"),
        TemplateField("shop_website", "Shop Website", FieldType.URL, example="https://fixit.example.com"),
    )),
)

INSURANCE_POLICY_SECTIONS = (
    TemplateSection("Policy", (
        TemplateField("policy_number", "Policy Number", FieldType.TEXT, required=True, max_length=30,
                      pattern=r"^[A-Z]{3}-\d{4}-\d{4,6}$", example="INS-2024-12345",
                      description="Policy number (must be unique within the upload)"),
        TemplateField("insurer_name", "Insurance Company", FieldType.TEXT, required=True, max_length=100,
                      example="Santam Insurance"),
        TemplateField("coverage_type", "Coverage Type", FieldType.DROPDOWN, required=True,
                      options=("theft", "accidental_damage", "comprehensive", "extended_warranty"),
                      example="comprehensive"),
    )),
    TemplateSection("Policy Holder", (
        TemplateField("policy_holder", "Policy Holder", FieldType.TEXT, required=True, max_length=100,
                      example="Thandi Nkosi"),
        TemplateField("holder_email", "Holder Email", FieldType.EMAIL, required=True, example="thandi@example.com"),
        TemplateField("holder_phone", "Holder Phone", FieldType.PHONE, example="+27 82 555 0199"),
    )),
    TemplateSection("Insured Device", (
        TemplateField("serial_number", "Serial Number", FieldType.TEXT, required=True, max_length=50,
                      example="ABC123XYZ456"),
        TemplateField("imei", "IMEI", FieldType.TEXT, pattern=IMEI_PATTERN, example="123456789012345"),
        TemplateField("device_value", "Device Value", FieldType.NUMBER, example="18999.00"),
    )),
    TemplateSection("Cover", (
        TemplateField("premium_monthly", "Monthly Premium", FieldType.NUMBER, required=True, example="189.00"),
        TemplateField("excess_amount", "Excess Amount", FieldType.NUMBER, example="1500"),
        TemplateField("start_date", "Start Date", FieldType.DATE, required=True, example="2024-03-01"),
        TemplateField("expiry_date", "Expiry Date", FieldType.DATE, required=True, example="2025-02-28",
                      description="Format: YYYY-MM-DD (may be in the future)"),
        TemplateField("policy_document_url", "Policy Document URL", FieldType.URL,
                      example="https://example.com/policies/INS-2024-12345.pdf"),
    )),
)

TEMPLATE_SECTIONS = {
    TemplateType.DEVICES: DEVICE_SECTIONS,
    TemplateType.MARKETPLACE_LISTINGS: MARKETPLACE_SECTIONS,
    TemplateType.LOST_REPORTS: LOST_REPORT_SECTIONS,
    TemplateType.FOUND_REPORTS: FOUND_REPORT_SECTIONS,
    TemplateType.REPAIR_LOGS: REPAIR_LOG_SECTIONS,
    TemplateType.INSURANCE_POLICIES: INSURANCE_POLICY_SECTIONS,
}

UNIQUE_FIELDS = {
    TemplateType.DEVICES: ("serial_number", "imei"),
    TemplateType.REPAIR_LOGS: ("job_number",),
    TemplateType.INSURANCE_POLICIES: ("policy_number",),
}

_DEFAULT_REGISTRY: SchemaRegistry | None = None


def default_registry() -> SchemaRegistry:
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        _DEFAULT_REGISTRY = SchemaRegistry(TEMPLATE_SECTIONS, UNIQUE_FIELDS)
    return _DEFAULT_REGISTRY
