import datetime
import io

import pytest
from lxml import etree

from atombuilder import ATOM_NAMESPACE, Element, Feed, UnknownElement

_BOOKS = """<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Books</title>
  <author><name>Fergus</name></author>
  <entry>
    <author><name>Shelagh Delaney</name></author>
    <title>Taste of Honey</title>
    <content type="text/html">Hello World</content>
  </entry>
</feed>"""


def _books_feed() -> Feed:
    feed = Feed()
    feed.set_title("Books")
    feed.set_author("Fergus")
    assert feed.count() == 2

    entry = feed.new_entry()
    entry.set_author("Shelagh Delaney")
    entry.set_title("Taste of Honey")
    field = entry.new_field("content", "Hello World")
    field.put("type", "text/html")
    return feed


def test_full_feed():
    assert _books_feed().to_string() == _BOOKS


def test_write_to_stream_is_repeatable():
    feed = _books_feed()
    first = io.StringIO()
    second = io.StringIO()
    feed.write(first)
    feed.write(second)
    assert first.getvalue() == second.getvalue() == _BOOKS
    assert str(feed) == _BOOKS


def test_output_is_well_formed_atom():
    root = etree.fromstring(_books_feed().to_bytes())
    ns = {"a": ATOM_NAMESPACE}
    assert root.tag == f"{{{ATOM_NAMESPACE}}}feed"
    assert root.findtext("a:title", namespaces=ns) == "Books"
    assert root.findtext("a:author/a:name", namespaces=ns) == "Fergus"
    entries = root.findall("a:entry", namespaces=ns)
    assert len(entries) == 1
    content = entries[0].find("a:content", namespaces=ns)
    assert content.get("type") == "text/html"
    assert content.text == "Hello World"


def test_empty_feed():
    assert Feed().to_string() == '<feed xmlns="http://www.w3.org/2005/Atom">\n\n</feed>'


def test_entries_written_in_creation_order():
    feed = Feed()
    feed.set_id("urn:feed")
    for i in range(3):
        feed.new_entry().set_id(f"urn:{i}")
    xml = feed.to_string()
    assert xml.index("urn:0") < xml.index("urn:1") < xml.index("urn:2")
    assert [e.get("id").text for e in feed.entries] == ["urn:0", "urn:1", "urn:2"]


def test_entry_handles_stay_bound_after_more_entries():
    feed = Feed()
    first = feed.new_entry()
    feed.new_entry().set_title("second")
    first.set_title("first")
    assert feed.entries[0].get("title").text == "first"


def test_default_attributes():
    feed = Feed(default_attributes=True)
    feed.set_title("T")
    assert feed.to_string() == (
        '<feed xmlns="http://www.w3.org/2005/Atom"'
        ' xmlns:thr="http://purl.org/syndication/thread/1.0"'
        ' xmlns:media="http://search.yahoo.com/mrss/">\n'
        "  <title>T</title>\n"
        "</feed>"
    )
    etree.fromstring(feed.to_bytes())


def test_put_attribute_order():
    feed = Feed()
    feed.put_attribute("xml:lang", "en")
    feed.put_default_attributes()
    assert list(feed.attributes) == ["xml:lang", "xmlns:thr", "xmlns:media"]


def test_feed_links_and_setters():
    feed = Feed()
    feed.set_title("Old")
    feed.new_link("https://example.com/").put("rel", "alternate")
    feed.new_link("https://example.com/feed.xml").put("rel", "self")
    feed.set_title("New")
    feed.set_subtitle("Sub")
    feed.set_updated(datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc))
    feed.new_field("generator", "atombuilder")
    assert feed.count() == 6
    assert feed.get_first("link").attributes["rel"] == "alternate"
    assert feed.to_string() == (
        '<feed xmlns="http://www.w3.org/2005/Atom">\n'
        "  <title>New</title>\n"
        '  <link href="https://example.com/" rel="alternate"/>\n'
        '  <link href="https://example.com/feed.xml" rel="self"/>\n'
        "  <subtitle>Sub</subtitle>\n"
        "  <updated>2024-05-01T12:00:00Z</updated>\n"
        "  <generator>atombuilder</generator>\n"
        "</feed>"
    )


def test_feed_set_unknown():
    feed = Feed()
    with pytest.raises(UnknownElement):
        feed.set("title", Element("x"))
    assert feed.count() == 0


def test_write_error_propagates():
    class Broken:
        def __init__(self):
            self.calls = 0

        def write(self, s):
            self.calls += 1
            if self.calls > 2:
                raise OSError("disk full")

    feed = _books_feed()
    with pytest.raises(OSError, match="disk full"):
        feed.write(Broken())
    assert feed.to_string() == _BOOKS
