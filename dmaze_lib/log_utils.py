import logging

# Valid debug topics for the dmaze project.
PROJECT_TOPICS = {
    "dmaze": {
        "main",
        "generate",
        "layout",
        "geometry",
        "render",
        "export",
        "config",
    }
}


_LEVEL_COLORS = {
    logging.DEBUG: 252,
    logging.INFO: 111,
    logging.WARNING: 229,
    logging.ERROR: 210,
    logging.CRITICAL: 217,
}


class RichLogFormatter(logging.Formatter):
    """Prefixes each line with a fixed-width level and topic column."""

    def __init__(self, use_color=False):
        super().__init__()
        self.use_color = use_color

    def _prefix(self, record) -> str:
        level = f"{record.levelname[:5]:<5}"
        topic = f"{record.name.rsplit('.', 1)[-1][:8]:<8}"
        if self.use_color:
            code = _LEVEL_COLORS.get(record.levelno, 252)
            level = f"\033[38;5;{code}m{level}\033[0m"
            topic = f"\033[1m{topic}\033[0m"
        return f"{level}:{topic}: "

    def format(self, record):
        text = super().format(record)
        if record.__dict__.get("raw"):
            return text
        prefix = self._prefix(record)
        return "\n".join(prefix + line for line in text.split("\n"))


def resolve_topics(debug_topics: str) -> set:
    """Expands a comma-separated topic string ("all", prefixes) to logger topics."""
    user_topics = [t.strip() for t in debug_topics.split(",") if t.strip()]
    valid_topics = PROJECT_TOPICS.get("dmaze", set())
    if "all" in user_topics:
        return set(valid_topics)
    return {full for u in user_topics for full in valid_topics if full.startswith(u)}


def setup_logging(level, color_logs=False, debug_topics=None, log_file=None):
    """Configures the 'dmaze' logger hierarchy."""
    root_logger = logging.getLogger("dmaze")
    if root_logger.hasHandlers():
        for h in root_logger.handlers[:]:
            root_logger.removeHandler(h)
            h.close()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(RichLogFormatter(use_color=color_logs))
    root_logger.addHandler(console_handler)
    root_logger.setLevel(level)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="w")
            file_handler.setFormatter(RichLogFormatter(use_color=False))
            root_logger.addHandler(file_handler)
            logging.getLogger("dmaze.main").info("Logging to file: %s", log_file)
        except IOError as e:
            root_logger.error("Could not open log file %s: %s", log_file, e)

    # Pillow's PNG plugin is chatty at DEBUG.
    logging.getLogger("PIL").setLevel(logging.WARNING)

    if debug_topics:
        for topic in resolve_topics(debug_topics):
            logging.getLogger(f"dmaze.{topic}").setLevel(logging.DEBUG)
