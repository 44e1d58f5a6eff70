"""Load arithmetic expressions from text files and archives."""
from pathlib import Path
import lzma
import tarfile
import tempfile
from typing import List
import zipfile

import py7zr

from safe_expression.common.logger import logger


SUPPORTED_FORMATS = (".txt", ".zip", ".tar.xz", ".7z")


def read_content(input_file: Path) -> str:
    """
    Read the raw text of a plain text file or of the first .txt file inside an archive.

    :param Path input_file: Path to the input file or archive

    :return: File content
    :rtype: str
    :raises ValueError: If the archive format is unsupported or contains no .txt file
    """
    if input_file.suffix == ".txt":
        return input_file.read_text(encoding="utf-8")
    return extract_archive(input_file)


def _extract_first_txt(archive_path: Path) -> str:
    """Extract the first .txt member of an archive; archive library errors propagate."""
    # Extract into a temporary directory, never next to the archive
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)
        if archive_path.suffix == ".zip":
            with zipfile.ZipFile(archive_path, "r") as zf:
                txt_files = [name for name in zf.namelist() if name.endswith(".txt")]
                if not txt_files:
                    raise ValueError("📄❌ No .txt file found in zip archive")
                zf.extract(txt_files[0], path=tmpdir_path)
                member = txt_files[0]

        elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
            with tarfile.open(archive_path, "r:xz") as tf:
                txt_members = [m for m in tf.getmembers() if m.isfile() and m.name.endswith(".txt")]
                if not txt_members:
                    raise ValueError("📄❌ No .txt file found in tar.xz archive")
                tf.extract(txt_members[0], path=tmpdir_path, filter="data")
                member = txt_members[0].name

        elif archive_path.suffix == ".7z":
            with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                txt_files = [name for name in archive.getnames() if name.endswith(".txt")]
                if not txt_files:
                    raise ValueError("📄❌ No .txt file found in 7z archive")
                archive.extract(path=tmpdir_path, targets=[txt_files[0]])
                member = txt_files[0]

        else:
            raise ValueError(
                f"📄❌ Unsupported input format: {''.join(archive_path.suffixes) or archive_path.name} "
                f"(expected one of {', '.join(SUPPORTED_FORMATS)})"
            )

        logger.info(f"📄 Extracted {member} from {archive_path.name}")
        return (tmpdir_path / member).read_text(encoding="utf-8")


def extract_archive(archive_path: Path) -> str:
    """
    Extract the first .txt file found in a supported archive and return its content as a string.

    Supported formats:
    - .zip
    - .tar.xz
    - .7z

    :param Path archive_path: Path to the archive file

    :return: Content of the extracted .txt file
    :rtype: str
    :raises ValueError: If the archive is corrupt, has no .txt file or its format is unsupported
    """
    try:
        return _extract_first_txt(archive_path)
    except (zipfile.BadZipFile, tarfile.TarError, lzma.LZMAError, py7zr.Bad7zFile) as exc:
        raise ValueError(f"📄❌ Corrupt archive {archive_path.name}: {exc}") from exc


def load_expressions(input_file: Path) -> List[str]:
    """
    Load non-empty, stripped expression lines from a text file or archive.

    :param Path input_file: Path to the input file or archive

    :return: Expressions in file order
    :rtype: List[str]
    """
    content = read_content(input_file)
    # Remove empty lines
    return [line.strip() for line in content.splitlines() if line.strip()]
