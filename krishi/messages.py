"""
Hindi / English user-facing messages.

Every notice shown to the farmer carries both languages, Hindi first,
joined with " / " the way the screens print them.
"""

from typing import Dict, Tuple

MESSAGES: Dict[str, Tuple[str, str]] = {
    # profile
    "profile_saved":       ("प्रोफाइल सफलतापूर्वक अपडेट हुई", "Profile updated successfully"),
    "profile_save_failed": ("प्रोफाइल अपडेट करने में त्रुटि", "Error updating profile"),
    "farm_saved":          ("खेत का डेटा सफलतापूर्वक अपडेट हुआ", "Farm data updated successfully"),
    "farm_save_failed":    ("खेत का डेटा अपडेट करने में त्रुटि", "Error updating farm data"),
    "load_failed":         ("डेटा लोड करने में त्रुटि", "Error loading your data"),
    "location_ok":         ("स्थान सफलतापूर्वक प्राप्त हुई", "Location obtained successfully"),
    "location_failed":     ("स्थान प्राप्त करने में त्रुटि", "Error getting location"),

    # auth
    "signin_error":   ("साइन इन त्रुटि", "Sign In Error"),
    "signup_error":   ("पंजीकरण त्रुटि", "Registration Error"),
    "welcome":        ("आप सफलतापूर्वक लॉग इन हो गए हैं", "You have successfully logged in"),
    "signup_pending": ("कृपया अपना ईमेल जांचें", "Please check your email for verification"),
    "signup_done":    ("पंजीकरण सफल!", "Registration Successful!"),
    "signed_out":     ("आप लॉग आउट हो गए हैं", "You have been logged out"),
    "login_required": ("कृपया पहले लॉग इन करें", "Please sign in first"),

    # analysis
    "upload_first":    ("कृपया पहले फोटो अपलोड करें", "Please upload a photo first"),
    "file_too_large":  ("फ़ाइल का साइज़ 10MB से कम होना चाहिए", "File size should be less than 10MB"),
    "analysis_done":   ("विश्लेषण पूरा हुआ", "Analysis completed"),

    # listings
    "no_prices":  ("कोई डेटा नहीं मिला", "No data found"),
    "no_schemes": ("कोई योजना नहीं मिली", "No schemes found"),
    "change_filters": ("कृपया अपने खोज शब्द या फिल्टर बदलें",
                       "Please change your search terms or filters"),

    # misc
    "not_found":   ("पेज नहीं मिला", "Page not found"),
    "unavailable": ("यह सुविधा आपके उपकरण पर उपलब्ध नहीं है",
                    "This feature is not available on your device"),
}


def bilingual(key: str) -> str:
    hindi, english = MESSAGES[key]
    return f"{hindi} / {english}"


class Notice:
    """A transient notification: success flag plus the bilingual text."""

    __slots__ = ("success", "message")

    def __init__(self, success: bool, message: str) -> None:
        self.success = success
        self.message = message

    @classmethod
    def ok(cls, key: str) -> "Notice":
        return cls(True, bilingual(key))

    @classmethod
    def failed(cls, key: str) -> "Notice":
        return cls(False, bilingual(key))

    def to_dict(self) -> Dict[str, object]:
        return {"success": self.success, "message": self.message}

    def __repr__(self) -> str:
        return f"Notice(success={self.success!r}, message={self.message!r})"
