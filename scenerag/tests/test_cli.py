import pytest

from scenerag.cli import build_parser


def test_query_arguments():
    args = build_parser().parse_args(["query", "energetic car scenes", "--campaign", "camp1", "--limit", "3"])
    assert (args.command, args.text, args.campaign, args.limit) == ("query", "energetic car scenes", "camp1", 3)


def test_similar_defaults():
    args = build_parser().parse_args(["similar", "vid1_scene_000"])
    assert args.limit == 5
    assert args.campaign is None


def test_command_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])
