"""
File type categories used for score boosting.

Each category ties natural-language words ("resume", "screenshot") to the file
formats those words usually refer to. The table is fixed and validated when the
module is imported; a broken table fails at startup, not mid-search.
"""

from typing import Dict, FrozenSet, List, Optional
from pydantic import BaseModel, Field, field_validator


class FileTypeCategory(BaseModel):
    """
    A named group of search words and the formats they imply.

    Attributes:
        name: Category name
        terms: Natural-language words that select this category
        formats: Extensions (without dot) belonging to this category
        variations: Per-word alternative spellings or synonyms
    """

    name: str = Field(..., min_length=1, description="Category name")
    terms: FrozenSet[str] = Field(..., min_length=1, description="Words selecting this category")
    formats: FrozenSet[str] = Field(..., min_length=1, description="Extensions in this category")
    variations: Dict[str, FrozenSet[str]] = Field(default_factory=dict, description="Word variations")

    @field_validator('terms', 'formats', mode='before')
    @classmethod
    def normalize_words(cls, v) -> FrozenSet[str]:
        """Lower-case words and strip leading dots from formats."""
        words = frozenset(str(word).strip().lower().lstrip('.') for word in v)
        if '' in words:
            raise ValueError("Category words cannot be empty")
        return words

    @field_validator('variations', mode='before')
    @classmethod
    def normalize_variations(cls, v) -> Dict[str, FrozenSet[str]]:
        return {
            str(word).strip().lower(): frozenset(str(alt).strip().lower() for alt in alts)
            for word, alts in (v or {}).items()
        }

    def vocabulary(self) -> FrozenSet[str]:
        """All words that select this category, including variations."""
        words = set(self.terms)
        for word, alternatives in self.variations.items():
            words.add(word)
            words.update(alternatives)
        return frozenset(words)

    def has_format(self, extension: str) -> bool:
        return extension.lower().lstrip('.') in self.formats


_CATEGORY_DEFINITIONS = [
    {
        'name': 'document',
        'terms': ['resume', 'cv', 'report', 'paper', 'doc', 'document', 'letter', 'invoice', 'contract'],
        'formats': ['pdf', 'doc', 'docx', 'txt', 'rtf', 'odt', 'pages', 'md', 'tex'],
        'variations': {
            'resume': ['curriculum', 'vitae', 'cv'],
            'document': ['doc', 'documentation'],
            'letter': ['cover', 'recommendation'],
        },
    },
    {
        'name': 'spreadsheet',
        'terms': ['spreadsheet', 'excel', 'sheet', 'table', 'data'],
        'formats': ['xlsx', 'xls', 'csv', 'numbers', 'ods'],
    },
    {
        'name': 'presentation',
        'terms': ['presentation', 'slides', 'deck', 'powerpoint'],
        'formats': ['ppt', 'pptx', 'key', 'odp'],
    },
    {
        'name': 'image',
        'terms': ['photo', 'image', 'picture', 'pic', 'screenshot', 'scan'],
        'formats': ['jpg', 'jpeg', 'png', 'gif', 'webp', 'svg', 'tiff', 'raw', 'bmp', 'heic'],
        'variations': {
            'photo': ['image', 'picture', 'pic'],
            'screenshot': ['screen', 'capture'],
        },
    },
    {
        'name': 'video',
        'terms': ['video', 'movie', 'film', 'recording', 'clip'],
        'formats': ['mp4', 'mov', 'avi', 'mkv', 'wmv', 'flv', 'webm', 'm4v'],
    },
    {
        'name': 'audio',
        'terms': ['audio', 'sound', 'music', 'song', 'podcast'],
        'formats': ['mp3', 'wav', 'aac', 'm4a', 'flac', 'ogg', 'wma'],
    },
    {
        'name': 'archive',
        'terms': ['archive', 'backup', 'compressed', 'zip'],
        'formats': ['zip', 'rar', '7z', 'tar', 'gz', 'bz2'],
    },
    {
        'name': 'code',
        'terms': ['code', 'source', 'script', 'program'],
        'formats': ['js', 'py', 'java', 'cpp', 'ts', 'html', 'css', 'php', 'rb', 'swift', 'go', 'rs', 'sql', 'sh', 'bat'],
        'variations': {
            'javascript': ['js', 'typescript', 'ts'],
            'python': ['py', 'ipynb'],
            'shell': ['bash', 'sh', 'zsh'],
        },
    },
]

# Filenames containing any of these lose PENALTY points
PENALTY_TERMS = ('config', 'test', 'example', 'temp', 'tmp', 'cache', 'bak', 'backup')
PENALTY = 1

# Filler words the term extractor is told to leave out; dropped if they slip through
STOP_WORDS = frozenset(['file', 'files', 'named', 'called', 'find', 'search', 'looking', 'for'])


def _build_categories(definitions: List[dict]) -> Dict[str, FileTypeCategory]:
    """Validate the category definitions and index them by name."""
    categories: Dict[str, FileTypeCategory] = {}
    owners: Dict[str, str] = {}

    for definition in definitions:
        category = FileTypeCategory.model_validate(definition)
        if category.name in categories:
            raise ValueError(f"Duplicate file type category: {category.name}")

        for word in category.vocabulary():
            if word in owners and owners[word] != category.name:
                raise ValueError(
                    f"Word '{word}' belongs to both '{owners[word]}' and '{category.name}'"
                )
            owners[word] = category.name

        categories[category.name] = category

    return categories


FILE_TYPE_CATEGORIES: Dict[str, FileTypeCategory] = _build_categories(_CATEGORY_DEFINITIONS)

_WORD_INDEX: Dict[str, FileTypeCategory] = {
    word: category
    for category in FILE_TYPE_CATEGORIES.values()
    for word in category.vocabulary()
}


def category_for_term(term: str) -> Optional[FileTypeCategory]:
    """
    Find the category a search word belongs to.

    A trailing plural "s" is tolerated ("screenshots" selects the image category).
    """
    word = term.strip().lower()
    category = _WORD_INDEX.get(word)
    if category is None and len(word) > 3 and word.endswith('s'):
        category = _WORD_INDEX.get(word[:-1])
    return category


def has_penalty_term(filename: str) -> bool:
    name = filename.lower()
    return any(term in name for term in PENALTY_TERMS)
