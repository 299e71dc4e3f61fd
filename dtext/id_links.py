import re
from typing import Dict, List, Optional

import attr


@attr.s(frozen=True, slots=True)
class IdLink:
    """One ``<title> #<id>`` shortcut and where it points to."""

    title: str = attr.ib()
    id_name: str = attr.ib()
    url: str = attr.ib()
    hex_id: bool = attr.ib(default=False, kw_only=True)

    @property
    def is_external(self) -> bool:
        return not self.url.startswith("/")

    @property
    def surface_re(self) -> str:
        return r"\ ".join(re.escape(w) for w in self.title.split(" "))


GITHUB_URL = "https://github.com/danbooru/danbooru"

ID_LINKS: List[IdLink] = [
    IdLink("post", "post", "/posts/"),
    IdLink("post changes", "post-changes-for", "/post_versions?search[post_id]="),
    IdLink("flag", "post-flag", "/post_flags/"),
    IdLink("note", "note", "/notes/"),
    IdLink("forum", "forum-post", "/forum_posts/"),
    IdLink("topic", "forum-topic", "/forum_topics/"),
    IdLink("comment", "comment", "/comments/"),
    IdLink("dmail", "dmail", "/dmails/"),
    IdLink("pool", "pool", "/pools/"),
    IdLink("user", "user", "/users/"),
    IdLink("artist", "artist", "/artists/"),
    IdLink("artist changes", "artist-changes-for", "/artist_versions?search[artist_id]="),
    IdLink("ban", "ban", "/bans/"),
    IdLink("bur", "bulk-update-request", "/bulk_update_requests/"),
    IdLink("alias", "tag-alias", "/tag_aliases/"),
    IdLink("implication", "tag-implication", "/tag_implications/"),
    IdLink("favgroup", "favorite-group", "/favorite_groups/"),
    IdLink("mod action", "mod-action", "/mod_actions/"),
    IdLink("record", "user-feedback", "/user_feedbacks/"),
    IdLink("wiki", "wiki-page", "/wiki_pages/"),
    IdLink("wiki changes", "wiki-page-changes-for", "/wiki_page_versions?search[wiki_page_id]="),
    IdLink("set", "set", "/post_sets/"),
    IdLink("ticket", "ticket", "/tickets/"),
    IdLink("takedown", "takedown", "/takedowns/"),
    IdLink("avoid posting", "avoid-posting", "/avoid_postings/"),
    IdLink("issue", "github", GITHUB_URL + "/issues/"),
    IdLink("pull", "github-pull", GITHUB_URL + "/pull/"),
    IdLink("commit", "github-commit", GITHUB_URL + "/commit/", hex_id=True),
]

ID_LINKS_BY_TITLE: Dict[str, IdLink] = dict((e.title, e) for e in ID_LINKS)

# `topic #1/p2`, `pool #1/p2`
PAGED_ID_LINKS = ("topic", "pool")


def lookup(title: str) -> IdLink:
    """Find an id-link by its surface title, ignoring case and spacing."""
    return ID_LINKS_BY_TITLE[" ".join(title.lower().split())]


def surface_rule(links: List[IdLink]) -> str:
    # longest titles first so that `post changes #1` wins over `post #1`
    ordered = sorted(links, key=lambda e: len(e.title), reverse=True)
    return "|".join(e.surface_re for e in ordered)


@attr.s(frozen=True, slots=True)
class InternalUrlRule:
    """How ``/<controller>/<id>`` on an internal domain is rendered."""

    controller: str = attr.ib()
    id_link: str = attr.ib()
    allow_query: bool = attr.ib(default=True)
    allow_fragment: bool = attr.ib(default=True)


INTERNAL_URL_RULES: List[InternalUrlRule] = [
    InternalUrlRule("posts", "post", allow_fragment=False),
    InternalUrlRule("pools", "pool", allow_query=False),
    InternalUrlRule("comments", "comment"),
    InternalUrlRule("forum_posts", "forum"),
    InternalUrlRule("forum_topics", "topic", allow_query=False, allow_fragment=False),
    InternalUrlRule("users", "user"),
    InternalUrlRule("artists", "artist"),
    InternalUrlRule("notes", "note"),
    InternalUrlRule("favorite_groups", "favgroup", allow_query=False),
    InternalUrlRule("wiki_pages", "wiki", allow_fragment=False),
]

INTERNAL_URL_RULES_BY_CONTROLLER: Dict[str, InternalUrlRule] = dict(
    (r.controller, r) for r in INTERNAL_URL_RULES
)


def internal_url_rule(
    controller: str, query: Optional[str], fragment: Optional[str]
) -> Optional[InternalUrlRule]:
    rule = INTERNAL_URL_RULES_BY_CONTROLLER.get(controller)
    if rule is None:
        return None
    if query and not rule.allow_query:
        return None
    if fragment and not rule.allow_fragment:
        return None
    return rule
