"""Central government schemes for farmers: sample catalogue and filtering."""

from typing import Dict, Iterable, List

ALL = "all"

CATEGORIES = {
    "subsidy":   ("💰", "सब्सिडी / Subsidy"),
    "insurance": ("🛡️", "बीमा / Insurance"),
    "loan":      ("🏦", "ऋण / Loan"),
    "training":  ("📚", "प्रशिक्षण / Training"),
    "equipment": ("🚜", "उपकरण / Equipment"),
}

STATUS_LABELS = {
    "active":      "सक्रिय / Active",
    "coming_soon": "जल्द आ रहा है / Coming Soon",
    "expired":     "समाप्त / Expired",
}

SCHEMES = (
    {
        "id": "1",
        "name": "PM-KISAN",
        "hindi_name": "प्रधानमंत्री किसान सम्मान निधि योजना",
        "category": "subsidy",
        "description": "Income support scheme providing ₹6000 per year to farmer families",
        "hindi_description": "किसान परिवारों को प्रति वर्ष ₹6000 की आर्थिक सहायता",
        "eligibility": ["Small and marginal farmers", "Landholding up to 2 hectares",
                        "Indian citizen"],
        "benefits": ["₹2000 every 4 months", "Direct bank transfer", "Total ₹6000 per year"],
        "documents_required": ["Aadhaar Card", "Bank Account Details", "Land Records",
                               "Mobile Number"],
        "application_process": ["Visit pmkisan.gov.in", "Click on Farmer Registration",
                                "Fill required details", "Submit documents",
                                "Wait for verification"],
        "deadline": "2024-12-31",
        "contact_info": "PM-KISAN Helpline: 155261",
        "website_url": "https://pmkisan.gov.in",
        "amount": "₹6,000 per year",
        "status": "active",
    },
    {
        "id": "2",
        "name": "Pradhan Mantri Fasal Bima Yojana",
        "hindi_name": "प्रधानमंत्री फसल बीमा योजना",
        "category": "insurance",
        "description": "Crop insurance scheme to protect farmers against crop losses",
        "hindi_description": "फसल नुकसान से किसानों की सुरक्षा के लिए बीमा योजना",
        "eligibility": ["All farmers", "Sharecroppers and tenant farmers",
                        "Must have crop loan"],
        "benefits": ["Coverage against natural calamities", "Premium subsidy up to 95%",
                     "Quick claim settlement"],
        "documents_required": ["Land Records", "Aadhaar Card", "Bank Account",
                               "Sowing Certificate"],
        "application_process": ["Apply through bank", "Online at pmfby.gov.in",
                                "Submit before sowing", "Pay premium",
                                "Get insurance coverage"],
        "deadline": "2024-06-30",
        "contact_info": "PMFBY Toll-free: 14447",
        "website_url": "https://pmfby.gov.in",
        "amount": "Premium from ₹500-2000",
        "status": "active",
    },
    {
        "id": "3",
        "name": "Kisan Credit Card",
        "hindi_name": "किसान क्रेडिट कार्ड",
        "category": "loan",
        "description": "Credit facility for agricultural and allied activities",
        "hindi_description": "कृषि और संबंधित गतिविधियों के लिए ऋण सुविधा",
        "eligibility": ["Farmers with land records", "Tenant farmers with valid agreement",
                        "Self Help Group members"],
        "benefits": ["Credit limit up to ₹3 lakh", "Low interest rate (7%)",
                     "Flexible repayment", "Insurance coverage included"],
        "documents_required": ["Land Records", "Aadhaar Card", "PAN Card", "Bank Statements"],
        "application_process": ["Visit nearest bank", "Fill KCC application",
                                "Submit documents", "Bank verification", "Card issuance"],
        "deadline": "Ongoing",
        "contact_info": "Bank Branch / CSC Center",
        "website_url": "https://kcc.gov.in",
        "amount": "Up to ₹3,00,000",
        "status": "active",
    },
    {
        "id": "4",
        "name": "Sub-Mission on Agricultural Mechanization",
        "hindi_name": "कृषि यांत्रिकीकरण पर उप-मिशन",
        "category": "equipment",
        "description": "Subsidy on agricultural machinery and equipment",
        "hindi_description": "कृषि मशीनरी और उपकरणों पर सब्सिडी",
        "eligibility": ["All categories of farmers", "Custom Hiring Centers",
                        "FPOs and cooperatives"],
        "benefits": ["Subsidy up to 50%", "SC/ST farmers get 70% subsidy",
                     "Women farmers get additional benefits"],
        "documents_required": ["Land Records", "Caste Certificate (if applicable)",
                               "Bank Account Details", "Equipment quotation"],
        "application_process": ["Apply at District Agriculture Office",
                                "Online application portal", "Document verification",
                                "Subsidy approval", "Purchase equipment"],
        "deadline": "2024-08-31",
        "contact_info": "District Agriculture Officer",
        "website_url": "https://agrimachinery.nic.in",
        "amount": "50-70% subsidy",
        "status": "active",
    },
)


def filter_schemes(
    schemes: Iterable[Dict], search: str = "", category: str = ALL
) -> List[Dict]:
    """Search matches the English name, Hindi name or English description; category is exact."""
    needle = (search or "").lower()
    result = []
    for scheme in schemes:
        if needle and not any(
            needle in scheme[key].lower()
            for key in ("name", "hindi_name", "description")
        ):
            continue
        if category and category != ALL and scheme["category"] != category:
            continue
        result.append(scheme)
    return result


def get_scheme(schemes: Iterable[Dict], scheme_id: str) -> Dict:
    for scheme in schemes:
        if scheme["id"] == scheme_id:
            return scheme
    raise KeyError(scheme_id)


def category_icon(category: str) -> str:
    return CATEGORIES.get(category, ("📄", ""))[0]


def category_name(category: str) -> str:
    return CATEGORIES.get(category, ("", "अन्य / Other"))[1]
