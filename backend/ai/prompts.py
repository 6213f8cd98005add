"""Prompt for the document extraction call.

The model is told the exact JSON shape to return. Its answer is still
treated as untrusted and normalized by texops.schemas.capture.
"""

EXTRACTION_PROMPT = """Analyze this image for a textile factory application.
Identify if it is an INVOICE, a SHELF, or a SKETCH. If it is none of these, use UNKNOWN.

For INVOICES: extract vendor, date, grand total, GST number, tax amount, and a LIST
of all items (name, quantity, unit price, line total).
For SHELVES: look for specific item names, counts, and color codes.
For SKETCHES: describe the design and suggest fabrics.

Return ONLY a JSON object with this shape (omit payloads that do not apply):
{
  "category": "INVOICE" | "SHELF" | "SKETCH" | "UNKNOWN",
  "summary": "one-sentence description of what is in the image",
  "invoiceData": {
    "vendorName": "supplier name",
    "date": "YYYY-MM-DD or DD/MM/YYYY as printed",
    "gstNumber": "GSTIN or tax id",
    "taxAmount": 0,
    "totalAmount": 0,
    "items": [{"name": "product", "quantity": 0, "unitPrice": 0, "total": 0}]
  },
  "shelfData": {
    "itemType": "specific item stored, e.g. 'Blue Denim Rolls'",
    "itemCount": 0,
    "dominantColors": ["color"],
    "colorCode": "visible color code, batch number or hex code",
    "quantityEstimate": "Low | Full | Overflowing"
  },
  "sketchData": {
    "designConcept": "style, cut and pattern",
    "fabricSuggestion": "fabrics that suit the drape and look"
  }
}

Numbers must be plain JSON numbers without currency symbols."""


def build_extraction_prompt() -> str:
    return EXTRACTION_PROMPT
