from __future__ import annotations

DEFAULT_LABEL_SUFFIX = ".json"
DEFAULT_OUTPUT_SEGMENT = "video_annotation_output"
DEFAULT_INPUT_SEGMENT = "video_annotation_input"


def is_label_file(object_path: str, suffix: str = DEFAULT_LABEL_SUFFIX) -> bool:
    return object_path.endswith(suffix)


def derive_source_path(
    object_path: str,
    *,
    suffix: str = DEFAULT_LABEL_SUFFIX,
    output_segment: str = DEFAULT_OUTPUT_SEGMENT,
    input_segment: str = DEFAULT_INPUT_SEGMENT,
) -> str:
    """Map a label output path back to the path its source video was recorded under.

    Only the first occurrence of `output_segment` is replaced, so a path that
    repeats the token keeps its later occurrences.
    """

    stem = object_path.removesuffix(suffix) if suffix else object_path
    return stem.replace(output_segment, input_segment, 1)
