"""Static format catalog: which conversions are offered and how formats group."""

# Source extension -> permissible targets
TARGET_FORMATS: dict[str, tuple[str, ...]] = {
    # Documents
    "pdf": ("docx", "txt", "jpg", "png"),
    "docx": ("pdf", "txt", "html"),
    "txt": ("pdf", "docx", "html"),
    # Images
    "jpg": ("png", "webp", "gif", "pdf"),
    "jpeg": ("png", "webp", "gif", "pdf"),
    "png": ("jpg", "webp", "gif", "pdf"),
    "webp": ("jpg", "png", "gif"),
    "gif": ("jpg", "png", "webp"),
    "heic": ("jpg", "png", "webp"),
    # Audio
    "mp3": ("wav", "ogg", "aac"),
    "wav": ("mp3", "ogg", "aac"),
    "ogg": ("mp3", "wav", "aac"),
    "aac": ("mp3", "wav", "ogg"),
    # Video
    "mp4": ("webm", "avi", "gif"),
    "webm": ("mp4", "avi", "gif"),
    "avi": ("mp4", "webm", "gif"),
    "mov": ("mp4", "webm", "avi"),
    # Archives
    "zip": ("rar", "tar", "7z"),
    "rar": ("zip", "tar", "7z"),
    "7z": ("zip", "rar", "tar"),
    "tar": ("zip", "rar", "7z"),
}

CATEGORIES: dict[str, frozenset[str]] = {
    "documents": frozenset({"pdf", "docx", "doc", "txt", "rtf", "odt", "html", "md"}),
    "images": frozenset({"jpg", "jpeg", "png", "gif", "webp", "heic", "svg", "tiff"}),
    "audio": frozenset({"mp3", "wav", "ogg", "aac", "flac", "m4a"}),
    "video": frozenset({"mp4", "webm", "avi", "mov", "mkv", "flv"}),
    "archives": frozenset({"zip", "rar", "7z", "tar", "gz"}),
}

OTHER = "other"

# Narrower extension groups used by the interactive page to pick its target list.
_PAGE_GROUPS: dict[str, frozenset[str]] = {
    "documents": frozenset({"pdf", "docx", "doc", "txt", "rtf"}),
    "images": frozenset({"jpg", "jpeg", "png", "gif", "webp", "heic"}),
    "audio": frozenset({"mp3", "wav", "ogg", "aac", "flac"}),
    "video": frozenset({"mp4", "webm", "avi", "mov", "mkv"}),
    "archives": frozenset({"zip", "rar", "7z", "tar", "gz"}),
}

PAGE_TARGETS: dict[str, tuple[tuple[str, str], ...]] = {
    "documents": (("pdf", "PDF"), ("docx", "DOCX"), ("txt", "TXT")),
    "images": (("jpg", "JPG"), ("png", "PNG"), ("webp", "WebP"), ("gif", "GIF")),
    "audio": (("mp3", "MP3"), ("wav", "WAV"), ("ogg", "OGG")),
    "video": (("mp4", "MP4"), ("webm", "WebM")),
    "archives": (("zip", "ZIP"),),
}

# (default target, alternative when the source already is the default)
_SUGGESTIONS: dict[str, tuple[str, str]] = {
    "documents": ("pdf", "docx"),
    "images": ("jpg", "png"),
    "audio": ("mp3", "wav"),
    "video": ("mp4", "webm"),
}

MIME_TYPES: dict[str, str] = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "txt": "text/plain",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "gif": "image/gif",
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "zip": "application/zip",
}


def target_formats_for(source_extension: str) -> frozenset[str]:
    """Return the targets offered for a source extension (empty when unknown)."""
    return frozenset(TARGET_FORMATS.get(source_extension.lower(), ()))


def category_of(extension: str) -> str:
    ext = extension.lower()
    for category, formats in CATEGORIES.items():
        if ext in formats:
            return category
    return OTHER


def get_file_extension(filename: str) -> str | None:
    if "." not in filename:
        return None
    return filename.rsplit(".", 1)[-1].lower() or None


def source_format_of(filename: str) -> str:
    """Lower-cased text after the last dot, or an empty string."""
    return get_file_extension(filename) or ""


def format_file_size(size_bytes: int | float) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / 1024 / 1024:.1f} MB"


def mime_type_for(fmt: str) -> str:
    return MIME_TYPES.get(fmt.lower(), "text/plain")


def page_group_of(extension: str) -> str | None:
    ext = extension.lower()
    for group, formats in _PAGE_GROUPS.items():
        if ext in formats:
            return group
    return None


def target_choices_for(filename: str) -> tuple[tuple[str, str], ...]:
    """(value, label) pairs the interactive page offers for a selected file."""
    group = page_group_of(source_format_of(filename))
    if group is None:
        return ()
    return PAGE_TARGETS[group]


def suggest_target_format(filename: str) -> str:
    """Default target for a freshly selected file, or "" when none applies."""
    ext = source_format_of(filename)
    group = page_group_of(ext)
    if group not in _SUGGESTIONS:
        return ""
    default, alternative = _SUGGESTIONS[group]
    return alternative if ext == default else default
