EDIT_WARNING_LINES = (
    "🛑 DO NOT EDIT THIS FILE ON GITHUB 🛑",
    "This file will be overwritten the next time the wiki is regenerated",
)


def center_text(text: str, width: int, fill: str = " ") -> str:
    """
    Center `text` in a string of `width` characters. If the remaining space is
    odd the extra fill character goes on the right. Text longer than `width`
    is returned as is. Only the first character of `fill` is used.
    """
    gap = max(0, width - len(text))
    fill = fill[0]
    padding = fill * (gap // 2)
    if gap % 2 == 1:
        return padding + text + padding + fill
    return padding + text + padding


def create_edit_warning(source_path: str | None = None) -> str:
    """
    Build the comment box placed at the top of generated files telling readers
    not to edit them on GitHub. When `source_path` is given the box also points
    at the file to edit instead.
    """
    lines = list(EDIT_WARNING_LINES)
    if source_path:
        lines.append(f"Edit the source in {source_path} to change this file")

    width = max(len(line) for line in lines) + 2
    border = "-" * width
    lines = [border, *lines, border]
    return "\n".join(f"<!--{center_text(line, width)}-->" for line in lines) + "\n"
