from __future__ import annotations

import pytest

from video_hint.labels.csv_export import LabelPayloadError, iter_label_rows, labels_to_csv


def _segment(start, end) -> dict:
    return {"segment": {"start_time_offset": {"seconds": start}, "end_time_offset": {"seconds": end}}}


def _annotation(description: str, *segments: dict) -> dict:
    return {"entity": {"description": description}, "segments": list(segments)}


def _payload(*results: list[dict]) -> dict:
    return {"annotation_results": [{"shot_label_annotations": annotations} for annotations in results]}


def test_single_segment_matches_expected_csv() -> None:
    payload = _payload([_annotation("Dog", _segment(0, 5))])

    assert labels_to_csv(payload) == "start_seconds,end_seconds,detected_label\n0,5,Dog"


def test_rows_follow_nested_order_without_resorting() -> None:
    payload = _payload(
        [
            _annotation("Tree", _segment(10, 12), _segment(1, 2)),
            _annotation("Car", _segment(3, 4)),
        ],
        [_annotation("Sky", _segment(0, 30))],
    )

    lines = labels_to_csv(payload).split("\n")

    assert lines == [
        "start_seconds,end_seconds,detected_label",
        "10,12,Tree",
        "1,2,Tree",
        "3,4,Car",
        "0,30,Sky",
    ]


@pytest.mark.parametrize("segments_per_result", [[1], [2, 3], [0, 4, 1]])
def test_line_count_is_header_plus_total_segments(segments_per_result: list[int]) -> None:
    results = [
        [_annotation(f"label-{idx}", *[_segment(n, n + 1) for n in range(count)])]
        for idx, count in enumerate(segments_per_result)
    ]

    csv_text = labels_to_csv(_payload(*results))

    assert len(csv_text.split("\n")) == 1 + sum(segments_per_result)
    assert csv_text.split("\n")[0] == "start_seconds,end_seconds,detected_label"
    assert "\n\n" not in csv_text


def test_conversion_is_deterministic() -> None:
    payload = _payload([_annotation("Dog", _segment(0, 5), _segment(6, 9))])

    assert labels_to_csv(payload) == labels_to_csv(payload)


def test_seconds_formatting_handles_floats_strings_and_missing_values() -> None:
    payload = {
        "annotation_results": [
            {
                "shot_label_annotations": [
                    {
                        "entity": {"description": "Person"},
                        "segments": [
                            {"segment": {"start_time_offset": {}, "end_time_offset": {"seconds": "7"}}},
                            {"segment": {"start_time_offset": {"seconds": 2.0}, "end_time_offset": {"seconds": 3.5}}},
                        ],
                    }
                ]
            }
        ]
    }

    rows = list(iter_label_rows(payload))

    assert [(row.start_seconds, row.end_seconds) for row in rows] == [("0", "7"), ("2", "3.5")]


def test_labels_with_commas_are_quoted() -> None:
    payload = _payload([_annotation("Sea, ocean", _segment(1, 2))])

    assert labels_to_csv(payload).split("\n")[1] == '1,2,"Sea, ocean"'


def test_result_without_shot_labels_contributes_no_rows() -> None:
    payload = {"annotation_results": [{"segment_label_annotations": []}, {"shot_label_annotations": [_annotation("Cat", _segment(0, 1))]}]}

    assert labels_to_csv(payload) == "start_seconds,end_seconds,detected_label\n0,1,Cat"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"annotation_results": []},
        {"annotation_results": None},
        {"annotation_results": "nope"},
        [],
        "text",
    ],
)
def test_missing_or_empty_results_raise(payload) -> None:
    with pytest.raises(LabelPayloadError):
        labels_to_csv(payload)


def test_missing_entity_description_raises() -> None:
    payload = {"annotation_results": [{"shot_label_annotations": [{"segments": [_segment(0, 1)]}]}]}

    with pytest.raises(LabelPayloadError, match="entity.description"):
        labels_to_csv(payload)


def test_non_numeric_seconds_raise() -> None:
    payload = _payload([_annotation("Dog", _segment("soon", 5))])

    with pytest.raises(LabelPayloadError, match="must be a number"):
        labels_to_csv(payload)


def test_segment_without_segment_object_raises() -> None:
    payload = _payload([_annotation("Dog", {"start": 0})])

    with pytest.raises(LabelPayloadError, match="segment must be an object"):
        labels_to_csv(payload)
