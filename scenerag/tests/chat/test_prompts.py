from scenerag.chat.prompts import NO_CONTEXT, SYSTEM_INSTRUCTION, build_messages, format_context
from scenerag.models import Message, SearchResult, VideoSummary
from ..helpers import make_scene


def result(scene_number=0, score=0.5):
    scene = make_scene(
        "vid1", scene_number, description="A red car", transcript="vroom",
        visual_elements=["car"], mood="energetic", product="Roadster",
    )
    return SearchResult(
        scene=scene,
        video=VideoSummary(id="vid1", file_name="launch.mp4", duration=30.0),
        score=score,
    )


def test_format_context_labels_scenes_in_order():
    text = format_context([result(0, 0.9), result(1, 0.4)])
    assert "[Scene 1] video=launch.mp4 (vid1) scene=vid1_scene_000 time=0.0s-5.0s score=0.900" in text
    assert "[Scene 2]" in text
    assert text.index("[Scene 1]") < text.index("[Scene 2]")
    assert "Product: Roadster" in text
    assert format_context([]) == NO_CONTEXT


def test_build_messages_keeps_last_history_window():
    history = [Message(role="user" if i % 2 == 0 else "assistant", content=f"m{i}") for i in range(8)]
    messages = build_messages(history, [result()], "latest question", history_window=3)

    assert messages[0] == {"role": "system", "content": SYSTEM_INSTRUCTION}
    assert messages[1]["role"] == "system"
    assert [m["content"] for m in messages[2:]] == ["m5", "m6", "m7", "latest question"]
    assert messages[-1]["role"] == "user"


def test_build_messages_without_history():
    messages = build_messages([Message(role="user", content="old")], [], "hi", history_window=0)
    assert [m["content"] for m in messages[1:]] == [NO_CONTEXT, "hi"]
