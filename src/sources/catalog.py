# src/sources/catalog.py — v1
"""Static breed catalogs for the catalog-tier image sources.

DOG_CEO_BREEDS mirrors https://dog.ceo/api/breeds/list/all: main breed to
its sub-breeds. Every main breed is itself a valid key; a sub-breed key is
written "main/sub". THECATAPI_BREEDS maps TheCatAPI breed ids to names.
"""

from __future__ import annotations

DOG_CEO_BREEDS: dict[str, tuple[str, ...]] = {
    "affenpinscher": (),
    "african": (),
    "airedale": (),
    "akita": (),
    "appenzeller": (),
    "australian": ("kelpie", "shepherd"),
    "basenji": (),
    "beagle": (),
    "bluetick": (),
    "borzoi": (),
    "bouvier": (),
    "boxer": (),
    "brabancon": (),
    "briard": (),
    "buhund": ("norwegian",),
    "bulldog": ("boston", "english", "french"),
    "bullterrier": ("staffordshire",),
    "cattledog": ("australian",),
    "cavapoo": (),
    "chihuahua": (),
    "chow": (),
    "clumber": (),
    "cockapoo": (),
    "collie": ("border",),
    "coonhound": (),
    "corgi": ("cardigan",),
    "cotondetulear": (),
    "dachshund": (),
    "dalmatian": (),
    "dane": ("great",),
    "deerhound": ("scottish",),
    "dhole": (),
    "dingo": (),
    "doberman": (),
    "elkhound": ("norwegian",),
    "entlebucher": (),
    "eskimo": (),
    "finnish": ("lapphund",),
    "frise": ("bichon",),
    "germanshepherd": (),
    "greyhound": ("italian",),
    "groenendael": (),
    "havanese": (),
    "hound": ("afghan", "basset", "blood", "english", "ibizan", "plott", "walker"),
    "husky": (),
    "keeshond": (),
    "kelpie": (),
    "komondor": (),
    "kuvasz": (),
    "labradoodle": (),
    "labrador": (),
    "leonberg": (),
    "lhasa": (),
    "malamute": (),
    "malinois": (),
    "maltese": (),
    "mastiff": ("bull", "english", "tibetan"),
    "mexicanhairless": (),
    "mountain": ("bernese", "swiss"),
    "newfoundland": (),
    "otterhound": (),
    "ovcharka": ("caucasian",),
    "papillon": (),
    "pekinese": (),
    "pembroke": (),
    "pinscher": ("miniature",),
    "pitbull": (),
    "pointer": ("german", "germanlonghair"),
    "pomeranian": (),
    "poodle": ("medium", "miniature", "standard", "toy"),
    "pug": (),
    "puggle": (),
    "pyrenees": (),
    "redbone": (),
    "retriever": ("chesapeake", "curly", "flatcoated", "golden"),
    "ridgeback": ("rhodesian",),
    "rottweiler": (),
    "saluki": (),
    "samoyed": (),
    "schipperke": (),
    "schnauzer": ("giant", "miniature"),
    "segugio": ("italian",),
    "setter": ("english", "gordon", "irish"),
    "sharpei": (),
    "sheepdog": ("english", "shetland"),
    "shiba": (),
    "shihtzu": (),
    "spaniel": ("blenheim", "brittany", "cocker", "irish", "japanese", "sussex", "welsh"),
    "spitz": ("japanese",),
    "springer": ("english",),
    "stbernard": (),
    "terrier": (
        "american", "australian", "bedlington", "border", "cairn", "dandie",
        "fox", "irish", "kerryblue", "lakeland", "norfolk", "norwich",
        "patterdale", "russell", "scottish", "sealyham", "silky", "tibetan",
        "toy", "welsh", "westhighland", "wheaten", "yorkshire",
    ),
    "tervuren": (),
    "vizsla": (),
    "waterdog": ("spanish",),
    "weimaraner": (),
    "whippet": (),
    "wolfhound": ("irish",),
}

# Names that word matching cannot reach (nicknames, fused words, colors).
DOG_CEO_ALIASES: dict[str, str] = {
    "golden retriever": "retriever/golden",
    "goldenretriever": "retriever/golden",
    "bernese mountain dog": "mountain/bernese",
    "bernese": "mountain/bernese",
    "border collie": "collie/border",
    "bordercollie": "collie/border",
    "labrador retriever": "labrador",
    "labradorretriever": "labrador",
    "australian shepherd": "australian/shepherd",
    "australianshepherd": "australian/shepherd",
    "german shepherd": "germanshepherd",
    "yorkie": "terrier/yorkshire",
    "yorkshire terrier": "terrier/yorkshire",
    "great dane": "dane/great",
    "greatdane": "dane/great",
    "cavalier": "spaniel/blenheim",
    "cavalier king charles spaniel": "spaniel/blenheim",
    "shih tzu": "shihtzu",
    "siberian husky": "husky",
    "saint bernard": "stbernard",
    "st bernard": "stbernard",
    "chow chow": "chow",
    "shar pei": "sharpei",
    "bichon frise": "frise/bichon",
    "west highland white terrier": "terrier/westhighland",
    "westie": "terrier/westhighland",
    "jack russell terrier": "terrier/russell",
    "boston terrier": "bulldog/boston",
    "french bulldog": "bulldog/french",
    "frenchie": "bulldog/french",
    "pembroke welsh corgi": "pembroke",
    "corgi": "pembroke",
    "lhasa apso": "lhasa",
    "doberman pinscher": "doberman",
    "american pit bull terrier": "pitbull",
    "pit bull": "pitbull",
    "shetland sheepdog": "sheepdog/shetland",
    "sheltie": "sheepdog/shetland",
    "old english sheepdog": "sheepdog/english",
    "rhodesian ridgeback": "ridgeback/rhodesian",
    "alaskan malamute": "malamute",
    "great pyrenees": "pyrenees",
    "miniature schnauzer": "schnauzer/miniature",
    "miniatureschnauzer": "schnauzer/miniature",
}

THECATAPI_BREEDS: dict[str, str] = {
    "abys": "Abyssinian",
    "aege": "Aegean",
    "abob": "American Bobtail",
    "acur": "American Curl",
    "asho": "American Shorthair",
    "awir": "American Wirehair",
    "amau": "Arabian Mau",
    "amis": "Australian Mist",
    "bali": "Balinese",
    "bamb": "Bambino",
    "beng": "Bengal",
    "birm": "Birman",
    "bomb": "Bombay",
    "bslo": "British Longhair",
    "bsho": "British Shorthair",
    "bure": "Burmese",
    "buri": "Burmilla",
    "cspa": "California Spangled",
    "ctif": "Chantilly-Tiffany",
    "char": "Chartreux",
    "chau": "Chausie",
    "chee": "Cheetoh",
    "csho": "Colorpoint Shorthair",
    "crex": "Cornish Rex",
    "cymr": "Cymric",
    "cypr": "Cyprus",
    "drex": "Devon Rex",
    "dons": "Donskoy",
    "lihu": "Dragon Li",
    "emau": "Egyptian Mau",
    "ebur": "European Burmese",
    "esho": "Exotic Shorthair",
    "hbro": "Havana Brown",
    "hima": "Himalayan",
    "jbob": "Japanese Bobtail",
    "java": "Javanese",
    "khao": "Khao Manee",
    "kora": "Korat",
    "kuri": "Kurilian",
    "lape": "LaPerm",
    "mcoo": "Maine Coon",
    "mala": "Malayan",
    "manx": "Manx",
    "munc": "Munchkin",
    "nebe": "Nebelung",
    "norw": "Norwegian Forest Cat",
    "ocic": "Ocicat",
    "orie": "Oriental",
    "pers": "Persian",
    "pixi": "Pixie-bob",
    "raga": "Ragamuffin",
    "ragd": "Ragdoll",
    "rblu": "Russian Blue",
    "sava": "Savannah",
    "sfol": "Scottish Fold",
    "srex": "Selkirk Rex",
    "siam": "Siamese",
    "sibe": "Siberian",
    "sing": "Singapura",
    "snow": "Snowshoe",
    "soma": "Somali",
    "sphy": "Sphynx",
    "tonk": "Tonkinese",
    "toyg": "Toyger",
    "tang": "Turkish Angora",
    "tvan": "Turkish Van",
    "ycho": "York Chocolate",
}

THECATAPI_ALIASES: dict[str, str] = {
    "orientalshorthair": "orie",
    "oriental shorthair": "orie",
    "norwegianforest": "norw",
    "norwegian forest": "norw",
    "devon": "drex",
    "cornish": "crex",
    "selkirk": "srex",
}
