"""Profile -> prompt 文本格式化

输出为确定性的纯文本，供外部 prompt 构建步骤嵌入模型调用。
没有内容的段落整体省略（不输出空标题），以控制 prompt 长度。
"""

from datetime import datetime

from .config import ATTACHMENT_PREVIEW_LENGTH, RECENT_COMPLETIONS_IN_PROMPT
from .models.profile import HistoryEntry, Profile


def _truncate(text: str, limit: int = ATTACHMENT_PREVIEW_LENGTH) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_date(ts: datetime) -> str:
    """d/m/yyyy（意大利日期格式，不补零）"""
    return f"{ts.day}/{ts.month}/{ts.year}"


def _text_block(title: str, body: str) -> list[str]:
    if not body:
        return []
    return [f"## {title}", body, ""]


def _list_block(title: str, items: list[str]) -> list[str]:
    if not items:
        return []
    return [f"## {title}", *(f"- {item}" for item in items), ""]


def _entry_block(index: int, entry: HistoryEntry) -> list[str]:
    lines = [
        f"### {index}. {entry.title} ({entry.outcome.value})",
        f"Data: {format_date(entry.completed_at)}",
    ]
    if entry.notes:
        lines.append(f"Note del venditore: {entry.notes}")
    if entry.ai_analysis:
        lines.append(f"Analisi AI: {entry.ai_analysis}")
    if entry.attachments:
        lines.append("File caricati:")
        for att in entry.attachments:
            lines.append(f"- {att.file_name or att.uri}")
            if att.transcription:
                lines.append(f"  Contenuto: {_truncate(att.transcription)}")
            if att.summary:
                lines.append(f"  Riassunto: {_truncate(att.summary)}")
    lines.append("")
    return lines


def format_profile_for_prompt(profile: Profile) -> str:
    """将画像格式化为有序的纯文本文档"""
    custom = profile.custom_context
    stats = profile.stats

    lines: list[str] = [
        f"# CONTESTO VENDITORE: {profile.seller_name}",
        "",
        "## STATISTICHE PERFORMANCE",
        f"- Task completati: {stats.total_completed}",
        f"- Tasso di successo: {stats.success_rate}%",
        f"- Durata media task: {stats.average_duration} minuti",
        "",
    ]

    lines += _text_block("ISTRUZIONI SPECIFICHE DALL'ADMIN", custom.specific_instructions)
    lines += _list_block("PUNTI DI FORZA", custom.strengths)
    lines += _list_block("AREE DI MIGLIORAMENTO", custom.weaknesses)
    lines += _list_block("OBIETTIVI DI APPRENDIMENTO", custom.learning_goals)
    lines += _text_block("STILE DI COMUNICAZIONE PREFERITO", custom.communication_style)
    lines += _text_block("CONOSCENZE SETTORE", custom.industry_knowledge)
    lines += _text_block("LINEE GUIDA AZIENDALI", custom.company_guidelines)
    lines += _list_block("TATTICHE VINCENTI (da esperienze passate)", stats.effective_tactics)
    lines += _list_block("OBIEZIONI COMUNI INCONTRATE", stats.objection_signals)

    recent = profile.history[:RECENT_COMPLETIONS_IN_PROMPT]
    if recent:
        lines += ["## ULTIMI TASK COMPLETATI (contesto recente)", ""]
        for index, entry in enumerate(recent, start=1):
            lines += _entry_block(index, entry)

    return "\n".join(lines)
