from __future__ import annotations

import pytest

RSS_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0"
     xmlns:dc="http://purl.org/dc/elements/1.1/"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:media="http://search.yahoo.com/mrss/"
     xmlns:atom="http://www.w3.org/2005/Atom">
  <channel>
    <title>Example Feed</title>
    <link>https://example.com/</link>
    <atom:link href="https://example.com/feed.xml" rel="self" type="application/rss+xml"/>
    <description>All the news</description>
    <managingEditor>editor@example.com (Ed)</managingEditor>
    <item>
      <title>First</title>
      <link>https://example.com/1</link>
      <guid>https://example.com/1</guid>
      <description>Short one</description>
      <content:encoded><![CDATA[<p>Body one</p>]]></content:encoded>
      <pubDate>Mon, 01 Jan 2024 00:00:00 GMT</pubDate>
      <dc:creator>Alice</dc:creator>
      <image>https://example.com/1.png</image>
    </item>
    <item>
      <title>Second</title>
      <guid isPermaLink="false">id-2</guid>
      <description>Second body</description>
      <media:thumbnail url="https://example.com/2.png"/>
    </item>
    <item>
      <title>Third</title>
      <link>https://example.com/3</link>
    </item>
  </channel>
</rss>
"""

ATOM_FEED = b"""<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom" xmlns:media="http://search.yahoo.com/mrss/">
  <title>Atom Example</title>
  <subtitle>Sub</subtitle>
  <link rel="self" href="https://example.org/atom.xml"/>
  <link rel="alternate" href="https://example.org/"/>
  <icon>https://example.org/favicon.ico</icon>
  <author><name>Bob</name></author>
  <id>urn:feed</id>
  <updated>2024-02-03T04:05:06Z</updated>
  <entry>
    <id>urn:entry:1</id>
    <title>Entry one</title>
    <link href="https://example.org/1"/>
    <updated>2024-02-03T04:05:06Z</updated>
    <summary>Sum</summary>
    <content type="html">&lt;b&gt;Bold&lt;/b&gt;</content>
    <media:thumbnail url="https://example.org/1.jpg"/>
  </entry>
  <entry>
    <id>urn:entry:2</id>
    <title>Entry two</title>
    <author><name>Carol</name></author>
    <published>2024-02-01T00:00:00Z</published>
    <summary>Only a summary</summary>
  </entry>
</feed>
"""

RDF_FEED = b"""<?xml version="1.0"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns="http://purl.org/rss/1.0/"
         xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel rdf:about="https://example.net/">
    <title>RDF Feed</title>
    <link>https://example.net/</link>
    <description>Old school</description>
  </channel>
  <item rdf:about="https://example.net/a">
    <title>A</title>
    <link>https://example.net/a</link>
    <dc:date>2024-03-01T10:00:00+02:00</dc:date>
  </item>
</rdf:RDF>
"""


@pytest.fixture
def rss_feed() -> bytes:
    return RSS_FEED


@pytest.fixture
def atom_feed() -> bytes:
    return ATOM_FEED


@pytest.fixture
def rdf_feed() -> bytes:
    return RDF_FEED
