def ctx_prefix(*, pipeline: str | None = None, category: str | None = None) -> str:
    parts = []
    if pipeline is not None:
        parts.append(f"pipeline={pipeline}")
    if category is not None:
        parts.append(f"category={category}")
    return " ".join(parts) or "-"
