from scenerag.models import Scene


def compose_scene_text(scene: Scene) -> str:
    """Text that represents a scene in embedding space."""
    analysis = scene.analysis
    parts = [
        f"Scene {scene.scene_number} ({scene.start_time}s - {scene.end_time}s):",
        scene.description,
        "",
        f"Transcript: {scene.transcript}",
        "",
        f"Visual elements: {', '.join(analysis.visual_elements)}",
        f"Actions: {', '.join(analysis.actions)}",
        f"Mood: {analysis.mood}",
    ]
    if analysis.product:
        parts.append(f"Product: {analysis.product}")
    if analysis.cta:
        parts.append(f"Call to action: {analysis.cta}")
    parts.append(f"Colors: {', '.join(analysis.colors)}")
    return "\n".join(parts).strip()
