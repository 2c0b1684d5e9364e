"""
Rule-based Extraction Patterns and Keyword Lists.

Centralized configuration for the deterministic extractor: capturing regular
expressions, keyword lists and generic-word stoplists for each category.

Used by:
- api/services/rule_extractor.py (pattern and keyword candidates)
- api/services/fact_classifier.py (month names)

Regexes run over the original-case text; each pattern's first capture group
is the candidate value. Keywords are matched against the lowercased text with
word boundaries and title-cased for display.
"""

# =============================================================================
# SHARED FRAGMENTS
# =============================================================================

MONTHS = (
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
)

WEEKDAYS = (
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday",
)

_MONTH_NAMES = (
    r"January|February|March|April|May|June|July|August|September|October|November|December"
    r"|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec"
)
_MONTH = f"(?:{_MONTH_NAMES})"
# Next to a date keyword the month may be lowercase ("birthday is april 5")
_MONTH_ANY_CASE = f"(?i:{_MONTH_NAMES})"
_DAY = r"\d{1,2}(?:st|nd|rd|th)?"

# Words that end an interest phrase ("loves hiking in Colorado" -> "hiking")
_PHRASE_STOP = (
    r"(?:and|but|or|so|because|since|when|while|with|in|at|on|for|to|from|"
    r"last|next|this|every|during|after|before|then|too|also|a|very|really|"
    r"much|lot|lots|now|today|yesterday|tomorrow)"
)
# Lowercase phrase of up to five words
_PHRASE = rf"([A-Za-z][\w'-]*(?:\s+(?!{_PHRASE_STOP}\b)[A-Za-z][\w'-]*){{0,4}})"

# Proper-noun run: "Tokyo", "New York City", "St. Louis"
_PLACE = r"((?:St\.\s+)?[A-Z][\w'-]*(?:\s+[A-Z][\w'-]*){0,3})"


# =============================================================================
# INTERESTS
# =============================================================================

INTEREST_PATTERNS = [
    rf"\b(?i:really\s+)?(?i:love|loves|loved|like|likes|liked|enjoy|enjoys|enjoyed|adore|adores)\s+(?:to\s+)?{_PHRASE}",
    rf"\b(?i:plays|play|playing|played)\s+(?:the\s+)?{_PHRASE}",
    rf"\b(?i:into|obsessed with|passionate about|interested in|fan of|big fan of)\s+{_PHRASE}",
    rf"\b(?i:hobby is|hobbies are|hobbies include)\s+{_PHRASE}",
    r"\b(?i:favou?rite)\s+([a-z]+\s+(?i:is|are)\s+[A-Za-z][\w'-]*(?:\s+[A-Za-z][\w'-]*){0,3})",
]

INTEREST_KEYWORDS = [
    # Food & drink
    "sushi", "pizza", "ramen", "tacos", "pasta", "barbecue", "bbq", "chocolate",
    "coffee", "tea", "wine", "craft beer", "cocktails", "baking", "cooking",
    # Sports
    "tennis", "soccer", "football", "basketball", "baseball", "golf", "hockey",
    "volleyball", "cricket", "rugby", "pickleball", "running", "swimming",
    "cycling", "skiing", "snowboarding", "surfing", "climbing", "rock climbing",
    "hiking", "camping", "fishing", "yoga", "pilates", "boxing", "martial arts",
    # Arts & culture
    "music", "jazz", "guitar", "piano", "violin", "drums", "singing", "dancing",
    "painting", "drawing", "photography", "pottery", "knitting", "sewing",
    "reading", "writing", "poetry", "theater", "movies", "anime", "podcasts",
    # Games & other
    "chess", "board games", "video games", "gaming", "puzzles", "gardening",
    "traveling", "travel", "woodworking", "astronomy", "birdwatching",
]

INTEREST_STOPLIST = {
    "a lot", "so much", "lot", "lots", "often", "always", "sometimes",
    "it", "that", "this", "them", "those", "these", "you", "him", "her", "me",
    "stuff", "things", "everything", "anything", "something", "nothing",
    "the", "to", "going", "doing", "being", "having", "getting",
    "the idea", "the most", "the best", "most", "more", "well",
}


# =============================================================================
# IMPORTANT DATES
# =============================================================================

DATE_PATTERNS = [
    rf"\b((?i:birthday|bday|b-day|anniversary|wedding day|deadline|due date)\s+(?i:is|was|falls on|on)\s+(?:on\s+)?{_MONTH_ANY_CASE}\.?\s+{_DAY})\b",
    rf"\b({_MONTH}\.?\s+{_DAY}(?:,?\s+\d{{4}})?)\b",
    rf"\b({_DAY}\s+of\s+{_MONTH})\b",
    r"\b(\d{4}-\d{2}-\d{2})\b",
    r"\b(\d{1,2}/\d{1,2}(?:/\d{2,4})?)\b",
    rf"\b((?i:last|next|this)\s+{_MONTH})\b",
]

DATE_KEYWORDS = [
    "christmas", "christmas eve", "thanksgiving", "new year's eve", "new year's day",
    "valentine's day", "halloween", "easter", "hanukkah", "diwali", "passover",
    "ramadan", "eid", "lunar new year", "mother's day", "father's day",
    "graduation", "wedding day",
]

DATE_STOPLIST = {
    "today", "tomorrow", "yesterday", "soon", "later", "sometime",
    "last", "next", "this",
}


# =============================================================================
# PLACES
# =============================================================================

PLACE_PATTERNS = [
    rf"\b(?i:went|go|goes|going|moved|move|moving|traveled|travelled|travel|traveling|flew|drove|headed|heading)\s+(?i:to)\s+(?:the\s+)?{_PLACE}",
    rf"\b(?i:visited|visiting|visit|visits|toured)\s+(?:the\s+)?{_PLACE}",
    rf"\b(?i:lives|live|living|lived|stays|staying|based|grew up|raised|born)\s+(?i:in)\s+{_PLACE}",
    rf"\b(?i:from)\s+{_PLACE}",
    rf"\b(?i:works|work|working|worked)\s+(?i:at|for)\s+{_PLACE}",
    rf"\b(?i:trip|vacation|holiday|honeymoon)\s+(?i:to|in)\s+{_PLACE}",
]

PLACE_KEYWORDS = [
    # Cities
    "tokyo", "kyoto", "osaka", "seoul", "beijing", "shanghai", "hong kong",
    "singapore", "bangkok", "bali", "sydney", "melbourne", "auckland",
    "london", "paris", "rome", "milan", "barcelona", "madrid", "lisbon",
    "berlin", "amsterdam", "dublin", "prague", "vienna", "istanbul", "dubai",
    "new york", "new york city", "boston", "chicago", "seattle", "portland",
    "san francisco", "los angeles", "san diego", "austin", "denver", "miami",
    "atlanta", "nashville", "new orleans", "las vegas", "toronto", "vancouver",
    "montreal", "mexico city", "rio de janeiro", "buenos aires",
    # Countries & states
    "japan", "korea", "china", "india", "thailand", "vietnam", "australia",
    "italy", "france", "spain", "portugal", "germany", "ireland", "greece",
    "england", "scotland", "canada", "mexico", "brazil", "peru", "iceland",
    "california", "colorado", "texas", "florida", "hawaii", "alaska", "oregon",
    "washington", "new mexico", "arizona", "utah", "vermont", "maine",
    # Venues (generic words that often end a proper name, like "park", are left out)
    "cafe", "coffee shop", "gym", "airport", "zoo", "mountains",
]

PLACE_STOPLIST = {
    "restaurant", "home", "there", "here", "work", "school", "the store",
    "store", "the office", "office", "somewhere", "anywhere", "everywhere",
    "i", "my", "me", "the", "a", "an",
} | set(MONTHS) | set(WEEKDAYS)
