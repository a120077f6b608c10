"""
上传文档处理

文本文件直接读取内容；PDF 与 Word 文档不做文本抽取，用占位说明代替。
"""

from pathlib import Path
from typing import Optional, Union

from legalinsight.config import Config

TEXT_EXTENSIONS = {".txt"}
PLACEHOLDER_EXTENSIONS = {".pdf", ".doc", ".docx"}
DOCUMENT_SEPARATOR = "\n\n--- Uploaded Document Content ---\n"


class DocumentError(ValueError):
    """上传文档不符合要求"""


def document_placeholder(filename: str) -> str:
    return f"[Document: {filename}] - Content will be analyzed"


def read_document(
    filename: str,
    content: bytes,
    max_bytes: int = Config.MAX_UPLOAD_BYTES,
) -> str:
    """
    读取上传文档

    Args:
        filename: 文件名（用于判断类型）
        content: 文件内容
        max_bytes: 大小上限

    Returns:
        文档文本或占位说明

    Raises:
        DocumentError: 类型不支持或文件过大
    """
    extension = Path(filename).suffix.lower()
    if extension not in TEXT_EXTENSIONS | PLACEHOLDER_EXTENSIONS:
        raise DocumentError("Please upload a PDF, Word document, or text file.")
    if len(content) > max_bytes:
        raise DocumentError(f"Please upload a file smaller than {max_bytes // (1024 * 1024)}MB.")

    if extension in TEXT_EXTENSIONS:
        return content.decode("utf-8", errors="replace")
    return document_placeholder(filename)


def read_document_file(path: Union[str, Path], max_bytes: int = Config.MAX_UPLOAD_BYTES) -> str:
    path = Path(path)
    return read_document(path.name, path.read_bytes(), max_bytes=max_bytes)


def build_case_text(case_text: str, document_text: Optional[str] = None) -> str:
    """
    合并案件描述与文档内容

    Raises:
        DocumentError: 两者都为空
    """
    if not case_text.strip() and not document_text:
        raise DocumentError("Please enter case details or upload a document.")
    if document_text:
        return f"{case_text}{DOCUMENT_SEPARATOR}{document_text}"
    return case_text
