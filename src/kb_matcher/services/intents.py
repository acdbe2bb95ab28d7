"""Canned replies for small talk, in English or Urdu.

Greetings, thanks, goodbyes and generic help requests are answered without
touching the knowledge base. The reply language follows the script of the
user's message.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
import re
from typing import Literal


DetectedLanguage = Literal["ur", "en"]

_ARABIC_SCRIPT_PATTERN = re.compile("[\u0600-\u06ff]")


def detect_language(text: str) -> DetectedLanguage:
    """Return "ur" when the text contains Arabic-script characters, else "en"."""
    return "ur" if _ARABIC_SCRIPT_PATTERN.search(text or "") else "en"


@dataclass(frozen=True)
class Intent:
    id: str
    patterns: Sequence[re.Pattern[str]]
    reply: Callable[[DetectedLanguage], str]

    def matches(self, text: str) -> bool:
        return any(pattern.search(text) for pattern in self.patterns)


@dataclass(frozen=True)
class IntentMatch:
    handled: bool
    intent_id: str | None = None
    reply: str | None = None


def _bilingual(urdu: str, english: str) -> Callable[[DetectedLanguage], str]:
    def reply(lang: DetectedLanguage) -> str:
        return urdu if lang == "ur" else english

    return reply


# First matching intent wins.
INTENTS: tuple[Intent, ...] = (
    Intent(
        id="greeting",
        patterns=(
            re.compile(r"^(hi|hello|hey|salam|salaam|as\s*sal(am|aam)\s*alaikum)", re.IGNORECASE),
            re.compile(r"السلام|السلام علیکم"),
        ),
        reply=_bilingual(
            "وعلیکم السلام! میں وسیلہ کی مدد کے لیے حاضر ہوں۔ آپ کس بارے میں جاننا چاہتے ہیں؟",
            "Hello! I'm here to help with Wasilah. What would you like to know?",
        ),
    ),
    Intent(
        id="thanks",
        patterns=(
            re.compile(r"^(thanks|thank you|shukriya|shukria)", re.IGNORECASE),
            re.compile(r"شکریہ"),
        ),
        reply=_bilingual(
            "خوش رہیں! مزید مدد چاہیے تو بتائیں۔",
            "You're welcome! Let me know if you need anything else.",
        ),
    ),
    Intent(
        id="goodbye",
        patterns=(
            re.compile(r"^(bye|goodbye|khuda hafiz|khudahafiz)", re.IGNORECASE),
            re.compile(r"خدا حافظ"),
        ),
        reply=_bilingual(
            "خدا حافظ! آپ کا دن خوشگوار رہے۔",
            "Goodbye! Have a great day.",
        ),
    ),
    Intent(
        id="help",
        patterns=(
            re.compile(r"help|madad|assist|support", re.IGNORECASE),
            re.compile(r"مدد"),
        ),
        reply=_bilingual(
            "میں مدد کیلئے حاضر ہوں: پروجیکٹس، رضاکارانہ خدمات، ایونٹس، یا رابطہ معلومات کے بارے میں پوچھیں۔",
            "I can help with projects, volunteering, events, or contact info. What would you like to know?",
        ),
    ),
)


def match_intent(text: str, intents: Sequence[Intent] = INTENTS) -> IntentMatch:
    """Return the canned reply of the first intent matching ``text``."""
    lang = detect_language(text)
    for intent in intents:
        if intent.matches(text):
            return IntentMatch(handled=True, intent_id=intent.id, reply=intent.reply(lang))
    return IntentMatch(handled=False)


def admin_offer_message(lang: DetectedLanguage) -> str:
    if lang == "ur":
        return "اگر آپ کا سوال حل نہیں ہوا تو کیا آپ ایڈمن سے بات کرنا چاہیں گے؟ 'ہاں' لکھیں، ہم فوراً رابطہ کروا دیں گے۔"
    return "If that didn't answer your question, would you like to talk to an admin? Reply 'yes' and we'll connect you shortly."


def admin_confirm_message(lang: DetectedLanguage) -> str:
    if lang == "ur":
        return "ٹھیک ہے! ایک ایڈمن جلد آپ کے ساتھ ہوگا۔"
    return "Great! An admin will be with you shortly."


def error_message(lang: DetectedLanguage) -> str:
    if lang == "ur":
        return "معذرت، میں آپ کے سوال کا جواب نہیں دے سکا۔ کیا آپ ایڈمن سے بات کرنا چاہیں گے؟"
    return "Sorry, I couldn't process your question. Would you like to speak with an admin?"


def join_hint_message(lang: DetectedLanguage) -> str:
    if lang == "ur":
        return "وسیلہ میں شامل ہونے کے لیے Volunteer صفحہ پر جائیں اور application form بھریں۔ ہم 3-5 دن میں رابطہ کریں گے۔"
    return (
        "To join Wasilah, visit the Volunteer page and complete the application form. "
        "We will contact you within 3-5 business days."
    )
