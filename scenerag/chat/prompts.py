from typing import Dict, List, Sequence

from scenerag.models import Message, SearchResult

SYSTEM_INSTRUCTION = """You are an AI assistant helping marketers analyze their advertising videos.

You have access to these functions to gather information:
- count_campaigns: Get total number of campaigns
- list_campaigns: Get list of all campaigns with details
- get_campaign_details: Get details about a specific campaign
- get_campaign_analytics: Get analytics for a campaign (moods, products, visual elements)
- search_scenes: Search for video scenes by content or visual elements
- count_videos: Count videos in the system or campaign
- count_scenes: Count scenes in the system or campaign

When answering questions:
- Use function calls to retrieve accurate, real-time data
- Be conversational and helpful
- Reference specific scenes by their [Scene N] label when they support your answer
- If you need information, call the appropriate function first
- Format lists and data clearly
- Provide actionable insights"""

NO_CONTEXT = "No scenes matched this question in the current scope."


def format_scene_block(index: int, result: SearchResult) -> str:
    scene = result.scene
    analysis = scene.analysis
    lines = [
        f"[Scene {index}] video={result.video.file_name} ({result.video.id}) scene={scene.id} "
        f"time={scene.start_time:.1f}s-{scene.end_time:.1f}s score={result.score:.3f}",
        f"Description: {scene.description}",
    ]
    if scene.transcript:
        lines.append(f"Transcript: {scene.transcript}")
    if analysis.visual_elements:
        lines.append(f"Visual elements: {', '.join(analysis.visual_elements)}")
    lines.append(f"Mood: {analysis.mood}")
    if analysis.product:
        lines.append(f"Product: {analysis.product}")
    return "\n".join(lines)


def format_context(results: Sequence[SearchResult]) -> str:
    if not results:
        return NO_CONTEXT
    blocks = [format_scene_block(i, result) for i, result in enumerate(results, start=1)]
    return "Relevant scenes retrieved for this question:\n\n" + "\n\n".join(blocks)


def build_messages(
    history: Sequence[Message],
    context: Sequence[SearchResult],
    user_message: str,
    history_window: int = 5,
) -> List[Dict[str, str]]:
    """System instruction, retrieved scenes, the last ``history_window`` messages, then the new message."""
    recent = list(history)[-history_window:] if history_window > 0 else []
    messages = [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "system", "content": format_context(context)},
    ]
    messages.extend({"role": message.role, "content": message.content} for message in recent)
    messages.append({"role": "user", "content": user_message})
    return messages
