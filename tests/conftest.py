from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

import pytest

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="{media_type}"/>
  </rootfiles>
</container>
"""

OPF_TEMPLATE = """<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:identifier id="uid">test-book</dc:identifier>
    <dc:title>{book_title}</dc:title>
  </metadata>
  <manifest>
{items}
  </manifest>
  <spine>
{itemrefs}
  </spine>
</package>
"""


def xhtml(body: str, title: str = "Untitled") -> str:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">'
        f"<head><title>{title}</title></head><body>{body}</body></html>"
    )


def write_zip(path: Path, entries: Dict[str, str | bytes]) -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return path


def build_epub(
    path: Path,
    documents: Iterable[Tuple[str, str, Optional[str]]],
    *,
    opf_path: str = "OEBPS/content.opf",
    spine: Optional[Iterable[str]] = None,
    manifest_titles: Optional[Dict[str, str]] = None,
    book_title: str = "Test Book",
    media_type: str = "application/oebps-package+xml",
    include_container: bool = True,
) -> Path:
    """Write an EPUB whose documents are ``(item_id, href, markup)`` triples.

    A ``None`` markup declares the item in the manifest without storing it.
    """

    documents = list(documents)
    manifest_titles = manifest_titles or {}
    base_dir = opf_path.rsplit("/", 1)[0] + "/" if "/" in opf_path else ""
    items = []
    for item_id, href, _ in documents:
        title_attr = f' title="{manifest_titles[item_id]}"' if item_id in manifest_titles else ""
        items.append(
            f'    <item id="{item_id}" href="{href}" media-type="application/xhtml+xml"{title_attr}/>'
        )
    order = list(spine) if spine is not None else [item_id for item_id, _, _ in documents]
    itemrefs = [f'    <itemref idref="{item_id}"/>' for item_id in order]

    entries: Dict[str, str | bytes] = {"mimetype": "application/epub+zip"}
    if include_container:
        entries["META-INF/container.xml"] = CONTAINER_XML.format(
            opf_path=opf_path, media_type=media_type
        )
    entries[opf_path] = OPF_TEMPLATE.format(
        book_title=book_title, items="\n".join(items), itemrefs="\n".join(itemrefs)
    )
    for _, href, markup in documents:
        if markup is not None:
            entries[base_dir + href] = markup
    return write_zip(path, entries)


@pytest.fixture
def epub_factory(tmp_path):
    def factory(documents, name: str = "book.epub", **kwargs) -> Path:
        return build_epub(tmp_path / name, documents, **kwargs)

    return factory
