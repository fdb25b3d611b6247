from app.models import PromptPublic

LOOP_CONTROL_BLOCK = """
## Loop Control
- Maximum iterations: 25 (safety limit only - stop early when done)
- Stop immediately when all requirements are met
- Do NOT restart or repeat completed work
- If blocked or uncertain, ask for clarification instead of looping

## Completion Signal
When ALL requirements are fully implemented and verified:
1. Run any necessary tests or builds
2. Confirm no errors
3. Output: <promise>COMPLETE</promise>
4. STOP - do not continue after outputting COMPLETE"""


def format_prompt_for_export(prompt: PromptPublic) -> str:
    """Assemble the markdown block handed to a coding agent.

    Blank fields are omitted; each present field is trimmed.
    """
    parts: list[str] = []
    if prompt.requirements.strip():
        parts.append("## Requirements\n" + prompt.requirements.strip())
    if prompt.success_criteria.strip():
        parts.append("## Success Criteria\n" + prompt.success_criteria.strip())
    return "\n\n".join(parts)


def format_loop_ready_prompt(text: str) -> str:
    """Append the loop-control block and quote the result as one shell argument."""
    if not text:
        return ""
    full_prompt = text + "\n" + LOOP_CONTROL_BLOCK
    escaped = full_prompt.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def append_template_content(current: str, content: str) -> str | None:
    # None means the snippet is already in the field.
    if content.strip() in current:
        return None
    separator = "\n\n" if current else ""
    return current + separator + content
