"""
图片上传
写盘前按原始文件名校验扩展名，写盘后对生成的文件名再校验一次，不合格立即删除
"""

import os
import secrets
import time
from pathlib import Path
from typing import Optional, Set

from loguru import logger
from starlette.datastructures import UploadFile

INVALID_TYPE_MSG = "Invalid file type. Only jpeg, jpg, png, and gif files are allowed."
TOO_LARGE_MSG = "File too large. Maximum size is 5MB."
TOO_MANY_FILES_MSG = "Too many files. Only one file allowed."
UNEXPECTED_FIELD_MSG = "Unexpected field name for file upload."
NO_FILE_MSG = "File upload failed or invalid file type"

DEFAULT_ALLOWED_EXTS = {"jpeg", "jpg", "png", "gif"}
CHUNK_SIZE = 64 * 1024


class UploadRejected(ValueError):
    """上传被拒绝，消息可直接返回给客户端"""


def file_extension(filename: Optional[str]) -> str:
    return os.path.splitext(filename or "")[1].lower()


def is_allowed_extension(filename: Optional[str], allowed_exts: Set[str]) -> bool:
    ext = file_extension(filename).lstrip(".")
    return bool(ext) and ext in allowed_exts


def generate_filename(original_filename: Optional[str]) -> str:
    """<毫秒时间戳>_<随机 hex><扩展名>，不复用原始文件名"""
    ext = file_extension(original_filename)
    return f"{int(time.time() * 1000)}_{secrets.token_hex(8)}{ext}"


def upload_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return int(upload.size)
    pos = upload.file.tell()
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(pos)
    return size


class UploadGuard:
    """单文件上传的校验、落盘和清理"""

    def __init__(self, upload_dir: str, max_bytes: int, allowed_exts: Optional[Set[str]] = None) -> None:
        self.upload_dir = Path(upload_dir)
        self.max_bytes = int(max_bytes)
        self.allowed_exts = set(allowed_exts or DEFAULT_ALLOWED_EXTS)

    def ensure_upload_dir(self) -> None:
        # 并发首次创建时可能失败，只记录日志
        if self.upload_dir.is_dir():
            return
        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create upload directory {self.upload_dir}: {e}")

    def check_size(self, upload: UploadFile) -> None:
        if upload_size(upload) > self.max_bytes:
            raise UploadRejected(TOO_LARGE_MSG)

    def check_original_name(self, upload: UploadFile) -> None:
        """写盘前的第一道校验：原始文件名的扩展名"""
        if not is_allowed_extension(upload.filename, self.allowed_exts):
            raise UploadRejected(INVALID_TYPE_MSG)

    def write(self, upload: UploadFile) -> str:
        filename = generate_filename(upload.filename)
        self.ensure_upload_dir()
        target = self.upload_dir / filename
        upload.file.seek(0)
        written = 0
        with open(target, "wb") as f:
            while True:
                chunk = upload.file.read(CHUNK_SIZE)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_bytes:
                    break
                f.write(chunk)
        if written > self.max_bytes:
            self.remove(filename)
            raise UploadRejected(TOO_LARGE_MSG)
        return filename

    def verify_written(self, filename: str) -> None:
        """写盘后的第二道校验：生成文件名的扩展名，不合格删除文件"""
        if not is_allowed_extension(filename, self.allowed_exts):
            self.remove(filename)
            raise UploadRejected(INVALID_TYPE_MSG)

    def remove(self, filename: str) -> None:
        try:
            (self.upload_dir / filename).unlink()
            logger.warning(f"Invalid file was uploaded and deleted: {filename}")
        except OSError as e:
            logger.error(f"Failed to delete invalid upload {filename}: {e}")

    def save(self, upload: UploadFile) -> str:
        """完整流程：大小 -> 原始扩展名 -> 落盘 -> 复核，返回生成的文件名"""
        self.check_size(upload)
        self.check_original_name(upload)
        filename = self.write(upload)
        self.verify_written(filename)
        return filename

    @staticmethod
    def public_url(host: str, filename: str, prefix: str = "/uploads") -> str:
        return f"http://{host}{prefix.rstrip('/')}/{filename}"
