"""Renders backend messages as Gradio chat messages."""

from typing import Any, Dict, List


def _render_models(content: Dict[str, Any]) -> str:
    lines = [f"**Recommended models for {content['category']}**", ""]
    for model in content.get("models", []):
        tags = ", ".join(model.get("tags", [])[:3]) or "None"
        lines.append(f"### {model['title']}")
        lines.append(model.get("description", ""))
        lines.append(f"*Task:* {model.get('task_type', '')} | *Tags:* {tags}")
        if model.get("link"):
            lines.append(f"[↗ Visit Website]({model['link']})")
        lines.append("")
    return "\n".join(lines).strip()


def _render_tools(content: Dict[str, Any]) -> str:
    lines = [f"**Related tools for {content['category']}**", ""]
    for tool in content.get("tools", []):
        tags = ", ".join(tool.get("tags", [])[:3]) or "None"
        lines.append(f"### {tool['name']}")
        lines.append(tool.get("description", ""))
        details = [f"*Task:* {tool.get('task_type', '')}", f"*Tags:* {tags}"]
        if tool.get("rating") is not None:
            details.append(f"*Rating:* {tool['rating']}")
        lines.append(" | ".join(details))
        if tool.get("link"):
            lines.append(f"[↗ Visit Website]({tool['link']})")
        lines.append("")
    return "\n".join(lines).strip()


def render_content(content: Dict[str, Any]) -> str:
    kind = content.get("type")
    if kind == "llm_suggestions":
        return _render_models(content)
    if kind == "tool_suggestions":
        return _render_tools(content)
    if kind == "welcome_menu":
        options = " / ".join(f"**{o}**" for o in content.get("options", []))
        return f"{content['text']}\n\n{options}" if options else content["text"]
    return content.get("text", "")


def to_chat_message(message: Dict[str, Any]) -> Dict[str, str]:
    """Convert a backend message into a ``{"role", "content"}`` chat message."""
    role = "user" if message["role"] == "user" else "assistant"
    content = message.get("content") or {"type": "text", "text": message.get("text", "")}
    return {"role": role, "content": render_content(content)}


def to_chat_history(messages: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    return [to_chat_message(m) for m in messages]
