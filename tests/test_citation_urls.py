from wikicite.citation_urls import extract_citation_url, has_citation_url


def test_archive_url_preferred():
    markup = "<ref>{{cite web|url=http://a.com|archive-url=http://web.archive.org/x}}</ref>"
    assert extract_citation_url(markup) == "http://web.archive.org/x"


def test_archiveurl_alias_and_case():
    markup = "{{Cite news |URL=https://news.example/a |ArchiveURL=https://archive.ph/abc }}"
    assert extract_citation_url(markup) == "https://archive.ph/abc"


def test_url_parameter():
    markup = "<ref name=x>{{cite web |title=T |url= https://example.org/page?id=3 |access-date=2020}}</ref>"
    assert extract_citation_url(markup) == "https://example.org/page?id=3"


def test_prefixed_url_params_do_not_count_as_url():
    markup = "{{cite book|title=Book|chapter-url-access=registration|chapter-url=ftp-ish}}"
    assert extract_citation_url(markup) is None


def test_bare_url():
    markup = "<ref>[https://example.com/report.pdf Annual report], 2019.</ref>"
    assert extract_citation_url(markup) == "https://example.com/report.pdf"


def test_no_url():
    assert extract_citation_url("<ref>Smith, J. (2001). A Book. Publisher.</ref>") is None
    assert has_citation_url(None) is False
    assert has_citation_url("") is False
