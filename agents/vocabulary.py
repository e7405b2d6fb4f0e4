"""
Curated vocabularies for term classification.

Pure data: keyword sets per domain, brand lists, materials, gemstones,
countries, periods and object-type nouns. The domain agents combine these
tables into ordered extractor lists; nothing here contains matching logic.

Vocabulary is Swedish-first with English aliases, matching the marketplace
the proxy searches against.
"""

# ============================================================
# DOMAIN DETECTION KEYWORDS
# ============================================================

JEWELRY_KEYWORDS = [
    'ring', 'ringar', 'förlovningsring', 'vigselring',
    'halsband', 'kedja', 'collier',
    'armband', 'bangel',
    'örhängen', 'örhänge',
    'brosch', 'nål',
    'hänge', 'pendant',
    'klocka', 'armbandsur', 'fickur',
    'manschettknappar', 'knappar',
    'smycke', 'smycken', 'juveler',
]

# Any of these keeps an item out of the jewelry domain, watches take precedence
WATCH_MOVEMENT_TERMS = [
    'armbandsur', 'fickur', 'manuellt uppdrag', 'automatisk', 'quartz', 'kronometer',
]

WATCH_KEYWORDS = [
    'armbandsur', 'fickur', 'klocka', 'tidmätare', 'chronometer', 'stoppur',
    'watch', 'wristwatch', 'pocket watch', 'timepiece', 'chronograph',
    'väckarklocka', 'bordsur', 'väggur', 'golvur', 'mantelur', 'pendel',
]

AUDIO_KEYWORDS = [
    'förstärkare', 'amplifier', 'receiver', 'tuner', 'radio',
    'högtalare', 'speaker', 'subwoofer', 'monitors',
    'skivspelare', 'turntable', 'cd-spelare', 'kassettspelare',
    'stereoanläggning', 'stereo', 'hifi', 'hi-fi',
    'mixerbord', 'mixer', 'equalizer', 'crossover',
]

INSTRUMENT_KEYWORDS = [
    'flygel', 'piano', 'pianino', 'klaver', 'keyboard',
    'violin', 'viola', 'cello', 'kontrabas', 'fiol', 'altfiol',
    'gitarr', 'guitar', 'banjo', 'mandolin', 'luta', 'harp', 'harpa',
    'flöjt', 'flute', 'klarinett', 'oboe', 'fagott', 'saxofon',
    'trumpet', 'kornett', 'trombon', 'tuba', 'horn',
    'orgel', 'harmonium', 'dragspel', 'accordion',
    'trummor', 'drums', 'cymbaler', 'timpani', 'xylofon',
]

COIN_KEYWORDS = [
    'mynt', 'coin', 'coins', 'myntserie', 'myntsamling',
    'silvermynt', 'guldmynt', 'kopparmynt', 'bronsmynt',
    'medal', 'medalj', 'minnesmynt', 'commemorative',
    'sedel', 'banknote', 'paper money', 'riksdaler',
    'krona', 'kronor', 'skilling',
    'numismatic', 'numismatik', 'mynthandel',
]

STAMP_KEYWORDS = [
    'frimärke', 'frimärken', 'stamp', 'stamps', 'philatelic', 'philately',
    'postfrisk', 'stämplad', 'postmark', 'postal',
    'brevfrimärke', 'jubileumsfrimärke', 'minnesfrimärke',
    'frimärkssamling', 'frimärksalbum',
    'frimärksblad', 'frimärksblock', 'haefte',
    'frankering', 'porto', 'poststämpel',
]

# ============================================================
# BRANDS
# ============================================================

JEWELRY_BRANDS = [
    'van cleef', 'harry winston', 'georg jensen', 'david andersen',
    'cartier', 'tiffany', 'bulgari', 'chopard', 'graff',
    'mikimoto', 'boucheron', 'piaget', 'chanel', 'lapponia', 'kalevala',
]

WATCH_BRANDS = [
    # Swiss
    'patek philippe', 'audemars piguet', 'vacheron constantin', 'jaeger-lecoultre',
    'tag heuer', 'frederique constant', 'maurice lacroix', 'universal genève',
    'baume & mercier', 'grand seiko', 'a. lange & söhne', 'glashütte original',
    'rolex', 'omega', 'breitling', 'iwc', 'cartier', 'tudor',
    'longines', 'tissot', 'hamilton', 'oris', 'mido', 'certina', 'montblanc',
    'zenith', 'vulcain', 'movado', 'eterna', 'chronoswiss', 'ebel', 'corum',
    'chopard', 'hublot', 'panerai', 'bulgari', 'heuer',
    # German
    'nomos', 'sinn', 'stowa', 'tutima', 'laco', 'damasko',
    # Japanese
    'seiko', 'citizen', 'casio', 'orient', 'credor',
    # Nordic
    'lings', 'halda',
]

AUDIO_BRANDS = [
    'bang & olufsen', 'harman kardon', 'mark levinson', 'conrad johnson',
    'audio research', 'bowers & wilkins', 'monitor audio', 'polk audio',
    'cerwin vega', 'boston acoustics',
    'technics', 'pioneer', 'marantz', 'yamaha', 'denon', 'onkyo',
    'jbl', 'b&o', 'linn', 'naim', 'mcintosh', 'krell', 'quad', 'kef',
    'b&w', 'paradigm', 'klipsch',
]

INSTRUMENT_BRANDS = [
    # Piano
    'mason & hamlin', 'steinway', 'bösendorfer', 'fazioli', 'blüthner', 'bechstein',
    'yamaha', 'kawai', 'baldwin',
    # Strings
    'stradivarius', 'guarneri', 'amati', 'bergonzi', 'montagnana', 'vuillaume',
    'mirecourt', 'mittenwald',
    # Guitars
    'martin', 'gibson', 'fender', 'taylor', 'ovation', 'takamine', 'larrivée', 'collings',
    # Winds
    'selmer', 'buffet', 'leblanc', 'yanagisawa', 'keilwerth', 'holton', 'getzen',
    # Accordions
    'hohner', 'excelsior', 'scandalli', 'bugari',
]

# ============================================================
# MATERIALS
# ============================================================

# Raw vocabulary entry -> canonical search term
PRECIOUS_METAL_ALIASES = {
    'vitguld': 'guld', 'rödguld': 'guld', 'gulguld': 'guld', 'roséguld': 'guld',
    '18k': 'guld', '14k': 'guld', '9k': 'guld', 'gold': 'guld', 'guld': 'guld',
    'sterlingsilver': 'silver', 'sterling': 'silver', 'silver': 'silver',
    'platinum': 'platina', 'platina': 'platina',
}

JEWELRY_MATERIALS = [
    'vitguld', 'rödguld', 'gulguld', 'roséguld', '18k', '14k', '9k', 'guld', 'gold',
    'sterlingsilver', 'sterling', 'silver',
    'platina', 'platinum', 'titan', 'stål',
]

WATCH_MATERIALS = [
    'vitguld', 'rödguld', '18k', '14k', '9k', 'guld', 'gold',
    'sterling', 'silver', 'platina', 'platinum', 'titan', 'titanium',
    'stål', 'steel', 'rostfritt', 'stainless', 'doublé', 'guldpläterad',
    'förgylld', 'keramik', 'ceramic', 'carbon', 'aluminium', 'brons', 'bronze',
    'mässing', 'brass',
]

INSTRUMENT_MATERIALS = [
    'spruce', 'maple', 'ebony', 'rosewood', 'mahogany', 'cedar', 'walnut',
    'gran', 'lönn', 'ebenholz', 'rosenträ', 'mahogny', 'ceder', 'valnöt',
    'silver', 'guld', 'gold', 'mässing', 'brass', 'brons', 'bronze', 'koppar',
    'elfenben', 'ivory', 'kolfiber', 'carbon fiber',
]

COIN_MATERIALS = [
    'guld', 'gold', 'silver', 'koppar', 'copper', 'brons', 'bronze',
    'nickel', 'zink', 'zinc', 'järn', 'iron', 'stål', 'steel', 'platina', 'platinum',
]

# Materials the backoff ladder treats as distinctive (kept longer than generic words)
DISTINCTIVE_MATERIALS = [
    'guld', 'gold', 'silver', 'sterling', 'platina', 'platinum',
    'brons', 'bronze', 'mässing', 'tenn', 'koppar', 'porslin', 'fajans',
    'stengods', 'glas', 'kristall', 'elfenben', 'jakaranda', 'mahogny',
    'ek', 'björk', 'teak', 'marmor',
]

# ============================================================
# GEMSTONES
# ============================================================

GEMSTONES = [
    'diamant', 'briljant', 'brilliant', 'smaragd', 'rubin', 'safir', 'pärla', 'pearl',
    'onyx', 'opal', 'ametist', 'akvamarin', 'topas', 'granat', 'turmalin', 'jade',
]

GEMSTONE_ALIASES = {
    'briljant': 'diamant',
    'brilliant': 'diamant',
    'pearl': 'pärla',
}

# ============================================================
# COUNTRIES
# ============================================================

COUNTRIES = [
    'sverige', 'svensk', 'swedish', 'sweden', 'skandinavisk', 'nordic',
    'danmark', 'dansk', 'denmark', 'norge', 'norsk', 'norway',
    'finland', 'finsk', 'tyskland', 'tysk', 'german', 'germany',
    'frankrike', 'fransk', 'french', 'france', 'italien', 'italiensk', 'italian',
    'england', 'engelsk', 'english', 'british', 'usa', 'amerikansk', 'american',
    'japan', 'japansk', 'japanese', 'kina', 'kinesisk', 'chinese',
    'ryssland', 'rysk', 'russian', 'österrike', 'austrian', 'schweiz', 'swiss',
]

COUNTRY_ALIASES = {
    'svensk': 'sverige', 'swedish': 'sverige', 'sweden': 'sverige',
    'dansk': 'danmark', 'denmark': 'danmark',
    'norsk': 'norge', 'norway': 'norge',
    'finsk': 'finland',
    'tysk': 'tyskland', 'german': 'tyskland', 'germany': 'tyskland',
    'fransk': 'frankrike', 'french': 'frankrike', 'france': 'frankrike',
    'italiensk': 'italien', 'italian': 'italien',
    'engelsk': 'england', 'english': 'england', 'british': 'england',
    'amerikansk': 'usa', 'american': 'usa',
    'japansk': 'japan', 'japanese': 'japan',
    'kinesisk': 'kina', 'chinese': 'kina',
    'rysk': 'ryssland', 'russian': 'ryssland',
    'austrian': 'österrike', 'swiss': 'schweiz',
}

# ============================================================
# PERIODS
# ============================================================

BROAD_PERIODS = [
    'art nouveau', 'art deco', 'jugend', 'antik', 'vintage', 'retro',
    'renässans', 'barock', 'rokoko', 'gustaviansk', 'klassicism', 'empire',
    'biedermeier', 'viktoriansk', 'funktionalism', 'bauhaus', 'modernism',
]

# "1970-tal", "1970-talet", "1970 tal"
DECADE_PATTERN = r'\b((?:1[5-9]\d0|20[0-2]0)[-\s]?tal(?:et)?)\b'
# Four-digit years 1600-2029
YEAR_PATTERN = r'\b(1[6-9]\d{2}|20[0-2]\d)\b'

# ============================================================
# DENOMINATIONS & MODELS
# ============================================================

DENOMINATION_PATTERN = (
    r'\b(\d+(?:[,.]\d+)?\s*(?:öre|kronor|krona|skilling|riksdaler|mark|cent|euro|dollar|pound|franc))\b'
)

# Model numbers such as "SL1200", "PM 1", "CDJ2000"
MODEL_PATTERN = r'\b([a-z]{2,4}[-\s]?\d{2,4}[a-z]{0,3})\b'

# ============================================================
# OBJECT TYPES
# ============================================================

OBJECT_TYPE_NOUNS = [
    # Furniture
    'fåtölj', 'stol', 'stolar', 'bord', 'skåp', 'byrå', 'soffa', 'matta', 'spegel', 'möbel',
    # Art
    'tavla', 'målning', 'litografi', 'grafik', 'teckning', 'akvarell', 'skulptur',
    # Household
    'vas', 'skål', 'fat', 'tallrik', 'kopp', 'kanna', 'lampa', 'ljusstake',
    # Jewelry and watches
    'smycke', 'ring', 'halsband', 'brosch', 'armband', 'örhängen', 'hänge',
    'klocka', 'armbandsur', 'fickur', 'ur',
    # Audio and instruments
    'förstärkare', 'receiver', 'högtalare', 'skivspelare', 'radio', 'synthesizer',
    'piano', 'flygel', 'gitarr', 'violin', 'fiol', 'cello', 'saxofon', 'dragspel',
    # Numismatics and philately
    'mynt', 'medalj', 'sedel', 'frimärke', 'frimärken',
]

# Normalized English object types for audio, keeps searches in marketplace language
AUDIO_OBJECT_TYPES = {
    'förstärkare': 'förstärkare',
    'amplifier': 'förstärkare',
    'receiver': 'receiver',
    'tuner': 'tuner',
    'radio': 'radio',
    'högtalare': 'högtalare',
    'speaker': 'högtalare',
    'skivspelare': 'skivspelare',
    'turntable': 'skivspelare',
    'cd-spelare': 'cd-spelare',
    'kassett': 'kassettspelare',
}

# ============================================================
# CORE VOCABULARY
# ============================================================

ALL_BRANDS = sorted(set(JEWELRY_BRANDS + WATCH_BRANDS + AUDIO_BRANDS + INSTRUMENT_BRANDS))

# Terms protected from deselection outside full-control mode
CORE_VOCABULARY = frozenset(ALL_BRANDS) | frozenset(OBJECT_TYPE_NOUNS)

# Words never used on their own as a generic search term
STOP_WORDS = {
    'och', 'med', 'i', 'på', 'av', 'för', 'till', 'samt', 'en', 'ett', 'st', 'ca',
    'the', 'a', 'an', 'and', 'or', 'with', 'of', 'for', 'in', 'on',
}
