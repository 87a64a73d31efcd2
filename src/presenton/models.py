"""Request and response models for the Presenton API.

Options are expressed with Python names and translated to the service's
wire shape by :meth:`GenerateOptions.to_payload`. Responses are validated
into typed models; a body that does not fit is reported as a
RESPONSE_MALFORMED error rather than a pydantic exception.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    ValidationError,
    field_validator,
)

from presenton.errors import ErrorKind, PresentonError

M = TypeVar("M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Enums (values match the service exactly)
# ---------------------------------------------------------------------------


class Tone(str, Enum):
    """Tone of voice for the slide text."""

    DEFAULT = "default"
    CASUAL = "casual"
    PROFESSIONAL = "professional"
    FUNNY = "funny"
    EDUCATIONAL = "educational"
    SALES_PITCH = "sales_pitch"


class Verbosity(str, Enum):
    """How much text goes on each slide."""

    CONCISE = "concise"
    STANDARD = "standard"
    TEXT_HEAVY = "text-heavy"


class ContentGeneration(str, Enum):
    """How supplied content is processed.

    - PRESERVE: Keep content as provided
    - ENHANCE: Expand and improve content
    - CONDENSE: Summarize and shorten content
    """

    PRESERVE = "preserve"
    ENHANCE = "enhance"
    CONDENSE = "condense"


class ImageType(str, Enum):
    STOCK = "stock"
    AI_GENERATED = "ai-generated"


class Theme(str, Enum):
    """Built-in themes. Custom theme ids are passed as plain strings."""

    EDGE_YELLOW = "edge-yellow"
    LIGHT_ROSE = "light-rose"
    MINT_BLUE = "mint-blue"
    PROFESSIONAL_BLUE = "professional-blue"
    PROFESSIONAL_DARK = "professional-dark"


class Template(str, Enum):
    """Built-in templates. Custom template ids are passed as plain strings."""

    GENERAL = "general"
    MODERN = "modern"
    STANDARD = "standard"
    SWIFT = "swift"


class ExportFormat(str, Enum):
    PPTX = "pptx"
    PDF = "pdf"


class TaskStatus(str, Enum):
    """Server-assigned status of an async generation task."""

    PENDING = "pending"
    COMPLETED = "completed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED.value, TaskStatus.ERROR.value})


class Language(str, Enum):
    """Languages the service can generate in. Other strings pass through."""

    ENGLISH = "English"
    SPANISH = "Spanish (Español)"
    FRENCH = "French (Français)"
    GERMAN = "German (Deutsch)"
    PORTUGUESE = "Portuguese (Português)"
    ITALIAN = "Italian (Italiano)"
    DUTCH = "Dutch (Nederlands)"
    RUSSIAN = "Russian (Русский)"
    CHINESE_SIMPLIFIED = "Chinese (Simplified - 中文, 汉语)"
    CHINESE_TRADITIONAL = "Chinese (Traditional - 中文, 漢語)"
    JAPANESE = "Japanese (日本語)"
    KOREAN = "Korean (한국어)"
    ARABIC = "Arabic (العربية)"
    HINDI = "Hindi (हिन्दी)"
    BENGALI = "Bengali (বাংলা)"
    POLISH = "Polish (Polski)"
    CZECH = "Czech (Čeština)"
    SLOVAK = "Slovak (Slovenčina)"
    HUNGARIAN = "Hungarian (Magyar)"
    ROMANIAN = "Romanian (Română)"
    BULGARIAN = "Bulgarian (Български)"
    GREEK = "Greek (Ελληνικά)"
    SERBIAN = "Serbian (Српски / Srpski)"
    CROATIAN = "Croatian (Hrvatski)"
    BOSNIAN = "Bosnian (Bosanski)"
    SLOVENIAN = "Slovenian (Slovenščina)"
    FINNISH = "Finnish (Suomi)"
    SWEDISH = "Swedish (Svenska)"
    DANISH = "Danish (Dansk)"
    NORWEGIAN = "Norwegian (Norsk)"
    ICELANDIC = "Icelandic (Íslenska)"
    LITHUANIAN = "Lithuanian (Lietuvių)"
    LATVIAN = "Latvian (Latviešu)"
    ESTONIAN = "Estonian (Eesti)"
    MALTESE = "Maltese (Malti)"
    WELSH = "Welsh (Cymraeg)"
    IRISH = "Irish (Gaeilge)"
    SCOTTISH_GAELIC = "Scottish Gaelic (Gàidhlig)"
    HEBREW = "Hebrew (עברית)"
    PERSIAN = "Persian/Farsi (فارسی)"
    TURKISH = "Turkish (Türkçe)"
    KURDISH = "Kurdish (Kurdî / کوردی)"
    PASHTO = "Pashto (پښتو)"
    DARI = "Dari (دری)"
    UZBEK = "Uzbek (Oʻzbek)"
    KAZAKH = "Kazakh (Қазақша)"
    TAJIK = "Tajik (Тоҷикӣ)"
    TURKMEN = "Turkmen (Türkmençe)"
    AZERBAIJANI = "Azerbaijani (Azərbaycan dili)"
    URDU = "Urdu (اردو)"
    TAMIL = "Tamil (தமிழ்)"
    TELUGU = "Telugu (తెలుగు)"
    MARATHI = "Marathi (मराठी)"
    PUNJABI = "Punjabi (ਪੰਜਾਬੀ / پنجابی)"
    GUJARATI = "Gujarati (ગુજરાતી)"
    MALAYALAM = "Malayalam (മലയാളം)"
    KANNADA = "Kannada (ಕನ್ನಡ)"
    ODIA = "Odia (ଓଡ଼ିଆ)"
    SINHALA = "Sinhala (සිංහල)"
    NEPALI = "Nepali (नेपाली)"
    THAI = "Thai (ไทย)"
    VIETNAMESE = "Vietnamese (Tiếng Việt)"
    LAO = "Lao (ລາວ)"
    KHMER = "Khmer (ភាសាខ្មែរ)"
    BURMESE = "Burmese (မြန်မာစာ)"
    TAGALOG = "Tagalog/Filipino (Tagalog/Filipino)"
    JAVANESE = "Javanese (Basa Jawa)"
    SUNDANESE = "Sundanese (Basa Sunda)"
    MALAY = "Malay (Bahasa Melayu)"
    MONGOLIAN = "Mongolian (Монгол)"
    SWAHILI = "Swahili (Kiswahili)"
    HAUSA = "Hausa (Hausa)"
    YORUBA = "Yoruba (Yorùbá)"
    IGBO = "Igbo (Igbo)"
    AMHARIC = "Amharic (አማርኛ)"
    ZULU = "Zulu (isiZulu)"
    XHOSA = "Xhosa (isiXhosa)"
    SHONA = "Shona (ChiShona)"
    SOMALI = "Somali (Soomaaliga)"
    BASQUE = "Basque (Euskara)"
    CATALAN = "Catalan (Català)"
    GALICIAN = "Galician (Galego)"
    QUECHUA = "Quechua (Runasimi)"
    NAHUATL = "Nahuatl (Nāhuatl)"
    HAWAIIAN = "Hawaiian (ʻŌlelo Hawaiʻi)"
    MAORI = "Maori (Te Reo Māori)"
    TAHITIAN = "Tahitian (Reo Tahiti)"
    SAMOAN = "Samoan (Gagana Samoa)"


def _wire(value: Any) -> Any:
    """Enum members go over the wire as their values."""
    return value.value if isinstance(value, Enum) else value


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class GenerateOptions(BaseModel):
    """Options for generating a presentation.

    At least one of ``content``, ``slides_markdown`` or ``files`` must be
    given; range and consistency checks live in
    :func:`presenton.validation.validate_generate_options`.

    Attributes:
        content: Topic or source text for the presentation
        slides_markdown: Exact markdown for each slide
        slides_layout: Layout per slide; same length as slides_markdown
        num_slides: Number of slides to generate (1-50)
        instructions: Extra guidance for the generator
        tone: Tone of voice (default: Tone.DEFAULT)
        verbosity: Text density (default: Verbosity.STANDARD)
        content_generation: How to treat supplied content
        markdown_emphasis: Apply bold/italic emphasis (default: True)
        web_search: Enrich content with web search (default: False)
        image_type: Image source (default: ImageType.STOCK)
        theme: Built-in Theme or a custom theme id
        language: Language or a free-form language name
        template: Built-in Template or a custom template id (default: general)
        include_table_of_contents: Add a contents slide (default: False)
        include_title_slide: Add a title slide (default: True)
        allow_access_to_user_info: Let the service use profile info (default: True)
        files: File ids returned by ``client.files.upload``
        export_as: Output format (default: ExportFormat.PPTX)
        trigger_webhook: Fire configured webhooks on completion (default: False)
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    content: Optional[str] = None
    slides_markdown: Optional[list[str]] = None
    slides_layout: Optional[list[Optional[str]]] = None
    num_slides: Optional[StrictInt] = None
    instructions: Optional[str] = None
    tone: Optional[Tone] = None
    verbosity: Optional[Verbosity] = None
    content_generation: Optional[ContentGeneration] = None
    markdown_emphasis: Optional[StrictBool] = None
    web_search: Optional[StrictBool] = None
    image_type: Optional[ImageType] = None
    theme: Optional[Union[Theme, str]] = None
    language: Optional[Union[Language, str]] = None
    template: Optional[Union[Template, str]] = None
    include_table_of_contents: Optional[StrictBool] = None
    include_title_slide: Optional[StrictBool] = None
    allow_access_to_user_info: Optional[StrictBool] = None
    files: Optional[list[str]] = None
    export_as: Optional[ExportFormat] = None
    trigger_webhook: Optional[StrictBool] = None

    def to_payload(self) -> dict[str, Any]:
        """Translate to the JSON body expected by the generate endpoints."""

        def _or(value: Any, default: Any) -> Any:
            return default if value is None else value

        return {
            "content": self.content,
            "slides_markdown": self.slides_markdown,
            "slides_layout": self.slides_layout,
            "n_slides": self.num_slides,
            "instructions": self.instructions,
            "tone": _wire(_or(self.tone, Tone.DEFAULT)),
            "verbosity": _wire(_or(self.verbosity, Verbosity.STANDARD)),
            "content_generation": _wire(self.content_generation),
            "markdown_emphasis": _or(self.markdown_emphasis, True),
            "web_search": _or(self.web_search, False),
            "image_type": _wire(_or(self.image_type, ImageType.STOCK)),
            "theme": _wire(self.theme),
            "language": _wire(self.language),
            "template": _wire(_or(self.template, Template.GENERAL)),
            "include_table_of_contents": _or(self.include_table_of_contents, False),
            "include_title_slide": _or(self.include_title_slide, True),
            "allow_access_to_user_info": _or(self.allow_access_to_user_info, True),
            "files": self.files,
            "export_as": _wire(_or(self.export_as, ExportFormat.PPTX)),
            "trigger_webhook": _or(self.trigger_webhook, False),
        }


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class PresentationResult(BaseModel):
    """A generated presentation.

    Attributes:
        presentation_id: Unique identifier of the presentation
        path: URL path to view/download the exported file
        edit_path: URL path to edit the presentation in Presenton
        credits_consumed: Credits charged for the generation
    """

    model_config = ConfigDict(frozen=True)

    presentation_id: str
    path: str
    edit_path: Optional[str] = None
    credits_consumed: Optional[float] = None


class TaskSnapshot(BaseModel):
    """One observation of a server-owned async generation task.

    Fetched fresh on every poll; the server is the only source of truth.
    ``status`` is kept as the raw string so unknown values from newer
    servers are treated as non-terminal instead of failing validation.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    task_id: str = Field(alias="id")
    status: str
    message: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    data: Optional[PresentationResult] = None
    error: Any = None

    @field_validator("data", mode="before")
    @classmethod
    def _empty_data_is_missing(cls, value: Any) -> Any:
        # Completed-without-data is judged by the poller, not by validation
        if not value:
            return None
        return value

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class UploadResult(BaseModel):
    """File ids to pass as ``GenerateOptions.files``."""

    model_config = ConfigDict(frozen=True)

    file_ids: list[str]


def parse_model(
    model: Type[M],
    data: Any,
    *,
    request_id: Optional[str] = None,
) -> M:
    """Validate a decoded response body into *model*.

    Raises:
        PresentonError: RESPONSE_MALFORMED if the body does not fit.
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise PresentonError(
            ErrorKind.RESPONSE_MALFORMED,
            f"Unexpected response shape for {model.__name__}: {e.error_count()} validation error(s)",
            request_id=request_id,
            response_body=data,
            original_error=e,
        ) from e
