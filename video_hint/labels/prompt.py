from __future__ import annotations

PROMPT_INTRO = (
    "Here are the label detection results for a video. The results are in CSV. "
    "Based on the labels, describe to me at a high-level, what the video might show "
    "in sequential order. Keep your response to three short sentences: "
)
PROMPT_OUTRO = "Don't tell me what the video is about, just say What you think can be seen in the video:"
CSV_FENCE = '"""'


def build_video_hint_prompt(csv_text: str) -> str:
    """Wrap label CSV in the instruction consumed by the text-generation extension."""

    return f"{PROMPT_INTRO}\n{CSV_FENCE}\n{csv_text}\n{CSV_FENCE}\n{PROMPT_OUTRO}"
