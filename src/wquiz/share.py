import io
import logging
import os

from jinja2 import Environment, FileSystemLoader, TemplateNotFound
from matplotlib.figure import Figure

from .errors import ShareError
from .models import QuizSummary, ShareText

logger = logging.getLogger(__name__)

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")

TITLES = {
    "ko": "영어 단어 퀴즈 결과",
    "en": "English vocabulary quiz result",
}

COLUMNS = {
    "ko": ["단어", "정답", "내 답", "결과"],
    "en": ["Word", "Answer", "Mine", "Result"],
}

VERDICTS = {
    "ko": ("정답", "오답", "(미입력)"),
    "en": ("correct", "wrong", "(no answer)"),
}

env = Environment(loader=FileSystemLoader(TEMPLATE_DIR), autoescape=False)


def check_locale(locale: str) -> None:
    if locale not in TITLES:
        raise ShareError(f"Unsupported locale: {locale}")


def format_share_text(summary: QuizSummary, locale: str = "ko") -> ShareText:
    """Renders the result as plain text suitable for a share sheet or clipboard."""
    check_locale(locale)
    try:
        template = env.get_template(f"share_{locale}.txt")
    except TemplateNotFound as exc:
        raise ShareError(f"Missing share template for {locale}") from exc
    text = template.render(summary=summary).strip()
    return ShareText(title=TITLES[locale], text=text)


def render_result_image(summary: QuizSummary, locale: str = "ko") -> bytes:
    """Draws the result table and returns it as PNG bytes."""
    check_locale(locale)
    correct, wrong, empty = VERDICTS[locale]
    rows = [
        [r.prompt, r.answer, r.given_text or empty, correct if r.is_correct else wrong]
        for r in summary.records
    ]

    fig = Figure(figsize=(6, 1.2 + 0.35 * max(len(rows), 1)))
    ax = fig.add_subplot(1, 1, 1)
    ax.axis("off")
    ax.set_title(f"{TITLES[locale]} ({summary.score} / {summary.total})")
    if rows:
        table = ax.table(cellText=rows, colLabels=COLUMNS[locale], loc="center")
        for i, record in enumerate(summary.records, start=1):
            color = "#dff0d8" if record.is_correct else "#f2dede"
            for j in range(len(COLUMNS[locale])):
                table[i, j].set_facecolor(color)

    buf = io.BytesIO()
    try:
        fig.savefig(buf, format="png", bbox_inches="tight")
    except (ValueError, RuntimeError, OSError) as exc:
        logger.error(f"Failed to render result image: {exc}")
        raise ShareError(f"Could not render result image: {exc}") from exc
    return buf.getvalue()
