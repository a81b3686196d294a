#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Builders for small but complete EPUB packages used across the test-suite.

Packages are assembled in memory with zipfile, in either directory layout,
with an optional cover, information page, navigation document and images.
Chapter N is stored as ``NNNN.xhtml`` with id ``xhtmlNNNN``, nav map entry
``bodyNNNN`` and playOrder N.
"""

from __future__ import annotations

import io
import xml.etree.ElementTree as ET
import zipfile

from epub_updater.epub_structure import LEGACY_LAYOUT, EpubLayout

# Smallest valid images, content is irrelevant to the engine
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"

OPF = "http://www.idpf.org/2007/opf"
DC = "http://purl.org/dc/elements/1.1/"
NCX = "http://www.daisy.org/z3986/2005/ncx/"
XHTML = "http://www.w3.org/1999/xhtml"

BOOK_URL = "https://example.com/book/sample"

CONTAINER_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
    <rootfiles>
        <rootfile full-path="{opf}" media-type="application/oebps-package+xml"/>
    </rootfiles>
</container>
"""


def chapter_url(number: int) -> str:
    return f"https://example.com/book/sample/chapter-{number}"


def chapter_xhtml(title: str, body: str = "", images: list[str] | None = None, stylesheet: str | None = None) -> str:
    """
    XHTML of a chapter page.

    Args:
        title: Used for <title> and the <h1>
        body: Extra markup placed after the heading
        images: Image references written as <img src=...>
        stylesheet: Stylesheet reference for the <link> element
    """
    link = f'\n  <link href="{stylesheet}" rel="stylesheet" type="text/css"/>' if stylesheet else ""
    paragraph = body or f"Text of {title}."
    imgs = "".join(f'\n  <p><img alt="" src="{src}"/></p>' for src in images or [])
    return f"""<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
<head>
  <title>{title}</title>{link}
</head>
<body>
  <h1>{title}</h1>
  <p>{paragraph}</p>{imgs}
</body>
</html>
"""


def _opf(layout: EpubLayout, manifest: list[tuple[str, str, str]], spine: list[str], sources: dict[str, str], nav: bool) -> str:
    items = "\n".join(
        f'        <item href="{href}" id="{item_id}" media-type="{media_type}"' + (' properties="nav"' if nav and href == layout.nav_file_name else "") + "/>"
        for href, item_id, media_type in manifest
    )
    itemrefs = "\n".join(f'        <itemref idref="{idref}"/>' for idref in spine)
    source_lines = "".join(f'\n        <dc:source id="{sid}">{url}</dc:source>' for sid, url in sources.items())
    return f"""<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="BookId">
    <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:opf="http://www.idpf.org/2007/opf">
        <dc:title>Sample Book</dc:title>
        <dc:language>en</dc:language>
        <dc:creator opf:role="aut">Sample Author</dc:creator>
        <dc:identifier id="BookId" opf:scheme="URI">{BOOK_URL}</dc:identifier>
        <dc:description>A book used by the tests.</dc:description>
        <dc:subject>Testing</dc:subject>
        <meta content="Samples" name="calibre:series"/>
        <meta content="2" name="calibre:series_index"/>{source_lines}
    </metadata>
    <manifest>
{items}
    </manifest>
    <spine toc="ncx">
{itemrefs}
    </spine>
</package>
"""


def _ncx(layout: EpubLayout, chapters: list[tuple[int, str, str]]) -> str:
    points = "\n".join(
        f"""        <navPoint id="body{number:04d}" playOrder="{order}">
            <navLabel>
                <text>{title}</text>
            </navLabel>
            <content src="{href}"/>
        </navPoint>"""
        for order, (number, title, href) in enumerate(chapters, start=1)
    )
    return f"""<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE ncx PUBLIC "-//NISO//DTD ncx 2005-1//EN" "http://www.daisy.org/z3986/2005/ncx-2005-1.dtd">
<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">
    <head>
        <meta content="{BOOK_URL}" name="dtb:uid"/>
        <meta content="1" name="dtb:depth"/>
    </head>
    <docTitle>
        <text>Sample Book</text>
    </docTitle>
    <navMap>
{points}
    </navMap>
</ncx>
"""


def _nav(chapters: list[tuple[int, str, str]]) -> str:
    entries = "\n".join(f'            <li><a href="{href}">{title}</a></li>' for _, title, href in chapters)
    return f"""<?xml version="1.0" encoding="utf-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xmlns:epub="http://www.idpf.org/2007/ops">
<head>
    <title>Table of Contents</title>
</head>
<body>
    <nav epub:type="toc" id="toc">
        <h1>Table of Contents</h1>
        <ol>
{entries}
        </ol>
    </nav>
</body>
</html>
"""


def build_epub(
    layout: EpubLayout = LEGACY_LAYOUT,
    chapters: int = 3,
    cover: bool = True,
    information: bool = True,
    nav: bool = True,
    images: dict[int, list[str]] | None = None,
    source_urls: bool = True,
    first_number: int = 1,
    title_prefix: str = "Chapter",
) -> bytes:
    """
    Build a package.

    Args:
        layout: Directory layout
        chapters: Number of chapters
        cover: Add Text/Cover.xhtml as first spine item
        information: Add Text/0000_Information.xhtml after the cover
        nav: Add the navigation document
        images: Chapter number -> image file names (stored in the images
            directory and referenced from that chapter)
        source_urls: Record a dc:source for every chapter
        first_number: Sequence number of the first chapter
        title_prefix: Chapter titles are "<prefix> <number>"

    Returns:
        Package bytes
    """
    images = images or {}
    text_rel = layout.text_dir_rel
    images_rel = layout.images_dir_rel
    stylesheet_ref = f"../{layout.styles_dir_rel}/stylesheet.css"

    entries: dict[str, bytes] = {}
    manifest: list[tuple[str, str, str]] = [("toc.ncx", "ncx", "application/x-dtbncx+xml")]
    if nav:
        manifest.append((layout.nav_file_name, "nav", "application/xhtml+xml"))
    manifest.append((f"{layout.styles_dir_rel}/stylesheet.css", "stylesheet", "text/css"))
    spine: list[str] = []
    sources: dict[str, str] = {}
    nav_chapters: list[tuple[int, str, str]] = []

    entries["META-INF/container.xml"] = CONTAINER_TEMPLATE.format(opf=layout.content_opf).encode("utf-8")
    entries[layout.stylesheet] = b"body { margin: 0; }\n"

    if cover:
        entries[layout.cover_xhtml] = chapter_xhtml("Cover", "Cover page", stylesheet=stylesheet_ref).encode("utf-8")
        manifest.append((f"{text_rel}/Cover.xhtml", "cover", "application/xhtml+xml"))
        spine.append("cover")
    if information:
        entries[layout.information_xhtml] = chapter_xhtml("Information", "About this book", stylesheet=stylesheet_ref).encode("utf-8")
        manifest.append((f"{text_rel}/0000_Information.xhtml", "xhtml0000", "application/xhtml+xml"))
        spine.append("xhtml0000")

    image_number = 1
    for number in range(first_number, first_number + chapters):
        seq = f"{number:04d}"
        title = f"{title_prefix} {number}"
        refs = []
        for image_name in images.get(number, []):
            image_path = f"{layout.images_dir}/{image_name}"
            if image_path not in entries:
                entries[image_path] = PNG_BYTES if image_name.endswith(".png") else JPEG_BYTES
                media_type = "image/png" if image_name.endswith(".png") else "image/jpeg"
                manifest.append((f"{images_rel}/{image_name}", f"image{image_number:04d}", media_type))
                image_number += 1
            refs.append(f"../{images_rel}/{image_name}")
        href = f"{text_rel}/{seq}.xhtml"
        entries[f"{layout.text_dir}/{seq}.xhtml"] = chapter_xhtml(title, images=refs, stylesheet=stylesheet_ref).encode("utf-8")
        manifest.append((href, f"xhtml{seq}", "application/xhtml+xml"))
        spine.append(f"xhtml{seq}")
        if source_urls:
            sources[f"id.xhtml{seq}"] = chapter_url(number)
        nav_chapters.append((number, title, href))

    entries[layout.content_opf] = _opf(layout, manifest, spine, sources, nav).encode("utf-8")
    entries[layout.toc_ncx] = _ncx(layout, nav_chapters).encode("utf-8")
    if nav:
        entries[layout.nav_xhtml] = _nav(nav_chapters).encode("utf-8")

    return zip_entries(entries)


def zip_entries(entries: dict[str, bytes], mimetype: bytes | None = b"application/epub+zip") -> bytes:
    """Zip entries with an uncompressed mimetype first."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as z:
        if mimetype is not None:
            z.writestr(zipfile.ZipInfo("mimetype"), mimetype, compress_type=zipfile.ZIP_STORED)
        for name, data in entries.items():
            z.writestr(name, data, compress_type=zipfile.ZIP_DEFLATED)
    return buffer.getvalue()


def read_entries(data: bytes) -> dict[str, bytes]:
    """All entries of a package, in archive order."""
    with zipfile.ZipFile(io.BytesIO(data)) as z:
        return {info.filename: z.read(info) for info in z.infolist()}


def read_text(data: bytes, name: str) -> str:
    return read_entries(data)[name].decode("utf-8")


def replace_entries(data: bytes, changes: dict[str, bytes | str | None]) -> bytes:
    """
    Rebuild a package with some entries changed.

    Args:
        data: Package bytes
        changes: Entry name to new content; None removes the entry
    """
    entries = read_entries(data)
    mimetype = entries.pop("mimetype", None)
    for name, content in changes.items():
        if content is None:
            entries.pop(name, None)
        else:
            entries[name] = content.encode("utf-8") if isinstance(content, str) else content
    return zip_entries(entries, mimetype)


def _tree(data: bytes, name: str) -> ET.Element:
    return ET.fromstring(read_entries(data)[name])


def spine_ids(data: bytes, layout: EpubLayout = LEGACY_LAYOUT) -> list[str]:
    root = _tree(data, layout.content_opf)
    return [ref.get("idref") for ref in root.iter(f"{{{OPF}}}itemref")]


def manifest_items(data: bytes, layout: EpubLayout = LEGACY_LAYOUT) -> dict[str, str]:
    """Manifest id -> href."""
    root = _tree(data, layout.content_opf)
    return {item.get("id"): item.get("href") for item in root.iter(f"{{{OPF}}}item")}


def sources(data: bytes, layout: EpubLayout = LEGACY_LAYOUT) -> dict[str, str]:
    """dc:source id -> URL."""
    root = _tree(data, layout.content_opf)
    return {elem.get("id"): elem.text for elem in root.iter(f"{{{DC}}}source")}


def nav_map(data: bytes, layout: EpubLayout = LEGACY_LAYOUT) -> list[tuple[str, int, str]]:
    """(src, playOrder, label) of every nav map entry, in document order."""
    root = _tree(data, layout.toc_ncx)
    return [
        (
            point.find(f"{{{NCX}}}content").get("src"),
            int(point.get("playOrder")),
            point.find(f"{{{NCX}}}navLabel/{{{NCX}}}text").text,
        )
        for point in root.iter(f"{{{NCX}}}navPoint")
    ]


def nav_doc(data: bytes, layout: EpubLayout = LEGACY_LAYOUT) -> list[tuple[str, str]]:
    """(href, title) of every table of contents entry."""
    root = _tree(data, layout.nav_xhtml)
    return [(a.get("href"), a.text) for a in root.iter(f"{{{XHTML}}}a")]
