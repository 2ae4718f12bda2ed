"""Unit tests for the changelog document builder."""

import pytest

from releasebot.changelog import (
    BulletList,
    ChangelogEntry,
    ChangelogSection,
    Document,
    Heading,
    TextSpan,
    TicketLinkSpan,
    TicketReference,
    build_changelog_document,
    format_message_line,
)

BASE_URL = "https://acme.atlassian.net"


def _section(board: str | None, *messages: str) -> ChangelogSection:
    entries = []
    for message in messages:
        ticket = None
        if board is not None:
            ticket = TicketReference(board=board, number=message.split("-")[1].split("]")[0])
        entries.append(ChangelogEntry(message=message, ticket=ticket))
    return ChangelogSection(board=board, entries=tuple(entries))


@pytest.mark.unit
class TestFormatMessageLine:
    """Tests for format_message_line."""

    def test_leading_ticket(self) -> None:
        """A bracketed ticket becomes a link followed by the rest of the text."""
        item = format_message_line("[ABC-123] Commit 1", BASE_URL)

        assert item.spans == (
            TicketLinkSpan(
                text="[ABC-123]",
                key="ABC-123",
                url="https://acme.atlassian.net/browse/ABC-123#icft=ABC-123",
            ),
            TextSpan(" Commit 1"),
        )

    def test_every_reference_is_linked(self) -> None:
        """All references are links, not only the first one."""
        item = format_message_line("Fix ABC-1 and [def-2] then GHI-3", BASE_URL)

        assert [link.key for link in item.links] == ["ABC-1", "DEF-2", "GHI-3"]
        assert [type(span) for span in item.spans] == [
            TextSpan,
            TicketLinkSpan,
            TextSpan,
            TicketLinkSpan,
            TextSpan,
            TicketLinkSpan,
        ]

    @pytest.mark.parametrize(
        ("message", "link_count"),
        [
            ("No tickets here", 0),
            ("[ABC-1] one", 1),
            ("[ABC-1][DEF-2] adjacent", 2),
            ("ABC-1, DEF-2 and GHI-33", 3),
            ("", 0),
        ],
    )
    def test_spans_rebuild_message(self, message: str, link_count: int) -> None:
        """Span texts concatenate back to the message, with one link per reference."""
        item = format_message_line(message, BASE_URL)

        assert item.text == message
        assert len(item.links) == link_count
        assert all(span.text for span in item.spans)

    def test_base_url_trailing_slash(self) -> None:
        """A trailing slash on the base URL is not doubled."""
        item = format_message_line("[ABC-1]", BASE_URL + "/")

        assert item.links[0].url == "https://acme.atlassian.net/browse/ABC-1#icft=ABC-1"


@pytest.mark.unit
class TestBuildChangelogDocument:
    """Tests for build_changelog_document."""

    def test_heading_and_list_per_section(self) -> None:
        """Each section gives a heading then a bullet list."""
        sections = [
            _section("ABC", "[ABC-1] a", "[ABC-3] c"),
            _section("DEF", "[DEF-2] b"),
            _section(None, "misc"),
        ]

        document = build_changelog_document(sections, BASE_URL)

        assert [type(block) for block in document.content] == [
            Heading,
            BulletList,
            Heading,
            BulletList,
            Heading,
            BulletList,
        ]
        headings = [block.title for block in document.content if isinstance(block, Heading)]
        assert headings == ["ABC tickets", "DEF tickets", "Other"]
        first_list = document.content[1]
        assert isinstance(first_list, BulletList)
        assert [item.text for item in first_list.items] == ["[ABC-1] a", "[ABC-3] c"]

    def test_to_adf(self) -> None:
        """Serializes to the Atlassian Document Format."""
        document = build_changelog_document([_section("ABC", "[ABC-123] Commit 1")], BASE_URL)

        assert document.to_adf() == {
            "type": "doc",
            "version": 1,
            "content": [
                {
                    "type": "heading",
                    "attrs": {"level": 3},
                    "content": [{"type": "text", "text": "ABC tickets"}],
                },
                {
                    "type": "bulletList",
                    "content": [
                        {
                            "type": "listItem",
                            "content": [
                                {
                                    "type": "paragraph",
                                    "content": [
                                        {
                                            "type": "inlineCard",
                                            "attrs": {
                                                "url": "https://acme.atlassian.net/browse/ABC-123#icft=ABC-123"
                                            },
                                        },
                                        {"type": "text", "text": " Commit 1"},
                                    ],
                                }
                            ],
                        }
                    ],
                },
            ],
        }

    def test_empty_changelog(self) -> None:
        """No sections gives an empty document."""
        assert build_changelog_document([], BASE_URL).to_adf() == {
            "type": "doc",
            "version": 1,
            "content": [],
        }


@pytest.mark.unit
class TestDocumentFromText:
    """Tests for Document.from_text."""

    def test_single_paragraph(self) -> None:
        assert Document.from_text("TBD").to_adf() == {
            "type": "doc",
            "version": 1,
            "content": [{"type": "paragraph", "content": [{"type": "text", "text": "TBD"}]}],
        }

    def test_empty_text(self) -> None:
        """Empty text gives an empty paragraph, not an empty text node."""
        assert Document.from_text("").to_adf()["content"] == [{"type": "paragraph", "content": []}]
