from __future__ import annotations

import pytest

from docslug import ConfigurationError, Document, Reference, ScopeStrategy
from docslug.scope import resolve_scope, resolve_strategy, root_type


class Author(Document):
    pass


class Book(Document):
    references = {"author": Reference(Author)}


class Post(Document):
    pass


class Article(Post):
    pass


class Review(Post):
    pass


class Comment(Document):
    embedded = True


def test_resolve_strategy_prefers_explicit_scope(store):
    assert resolve_strategy(Book, "author", store) is ScopeStrategy.ASSOCIATION


def test_resolve_strategy_for_embedded_and_top_level_types(store):
    assert resolve_strategy(Comment, None, store) is ScopeStrategy.EMBEDDED
    assert resolve_strategy(Post, None, store) is ScopeStrategy.GLOBAL


def test_resolve_strategy_rejects_unknown_association(store):
    with pytest.raises(ConfigurationError, match="`publisher` is not an association of Book"):
        resolve_strategy(Book, "publisher", store)


def test_root_type_walks_to_top_of_collection(store):
    assert root_type(Article(), store) is Post
    assert root_type(Post(), store) is Post


def test_resolve_scope_excludes_record_identity(store, registry):
    spec = registry.register(Post, "title")
    article = Article(title="Hello")

    siblings = resolve_scope(article, spec, store)

    assert siblings.strategy is ScopeStrategy.GLOBAL
    assert siblings.exclude == article.id


def test_subclasses_sharing_a_collection_do_not_collide(registry, slugger):
    registry.register(Post, "title")
    article = Article(title="Hello")
    review = Review(title="Hello")

    slugger.save(article)
    slugger.save(review)

    assert article.slug == "hello"
    assert review.slug == "hello-1"


def test_association_scope_isolates_parents(registry, slugger):
    registry.register(Author, "name")
    registry.register(Book, "title", scope="author")
    tolkien = Author(name="J. R. R. Tolkien")
    lewis = Author(name="C. S. Lewis")
    slugger.save(tolkien)
    slugger.save(lewis)

    first = Book(title="Letters", author=tolkien)
    other_parent = Book(title="Letters", author=lewis)
    same_parent = Book(title="Letters", author=tolkien)
    for book in (first, other_parent, same_parent):
        slugger.save(book)

    assert first.slug == "letters"
    assert other_parent.slug == "letters"
    assert same_parent.slug == "letters-1"


def test_association_scope_falls_back_to_global_without_parent(store, registry, slugger):
    registry.register(Book, "title", scope="author")
    author = Author(name="Anonymous")
    store.save(author)
    slugger.save(Book(title="Beowulf", author=author))

    orphan = Book(title="Beowulf")
    siblings = resolve_scope(orphan, registry.spec_for(Book), store)
    slugger.save(orphan)

    assert siblings.strategy is ScopeStrategy.GLOBAL
    assert orphan.slug == "beowulf-1"


def test_association_scope_falls_back_to_global_for_unsaved_parent(store, registry, slugger):
    registry.register(Book, "title", scope="author")
    saved = Author(name="Saved")
    store.save(saved)
    slugger.save(Book(title="Beowulf", author=saved))

    book = Book(title="Beowulf", author=Author(name="Draft"))
    slugger.generate(book)

    assert book.slug == "beowulf-1"


def test_embedded_documents_are_scoped_by_parent(store, registry, slugger):
    registry.register(Comment, "body")
    first_post = Post(title="First")
    second_post = Post(title="Second")

    nice = store.embed(first_post, "comments", Comment(body="Nice!"))
    slugger.generate(nice)
    again = store.embed(first_post, "comments", Comment(body="nice"))
    slugger.generate(again)
    elsewhere = store.embed(second_post, "comments", Comment(body="Nice"))
    slugger.generate(elsewhere)

    assert nice.slug == "nice"
    assert again.slug == "nice-1"
    assert elsewhere.slug == "nice"


def test_embedded_relations_do_not_share_siblings(store, registry, slugger):
    registry.register(Comment, "body")
    post = Post(title="Post")

    comment = store.embed(post, "comments", Comment(body="Note"))
    slugger.generate(comment)
    annotation = store.embed(post, "annotations", Comment(body="Note"))
    slugger.generate(annotation)

    assert annotation.slug == "note"


def test_detached_embedded_document_has_no_siblings(store, registry, slugger):
    registry.register(Comment, "body")
    post = Post(title="Post")
    slugger.generate(store.embed(post, "comments", Comment(body="Note")))

    detached = Comment(body="Note")
    siblings = resolve_scope(detached, registry.spec_for(Comment), store)

    assert siblings.strategy is ScopeStrategy.EMBEDDED
    assert slugger.generate(detached) == "note"


class Site(Document):
    pass


class Page(Document):
    references = {"site": Reference(Site, inverse="entries")}


class Announcement(Document):
    references = {"site": Reference(Site, inverse="entries")}


class Draft(Document):
    references = {"site": Reference(Site)}


def test_named_inverse_collection_spans_child_types(store, registry, slugger):
    registry.register(Page, "title", scope="site")
    registry.register(Announcement, "title", scope="site")
    registry.register(Draft, "title", scope="site")
    home, blog = Site(name="Home"), Site(name="Blog")
    store.save(home)
    store.save(blog)

    page = Page(title="Launch", site=home)
    announcement = Announcement(title="Launch", site=home)
    elsewhere = Announcement(title="Launch", site=blog)
    draft = Draft(title="Launch", site=home)
    for record in (page, announcement, elsewhere, draft):
        slugger.save(record)

    assert store.inverse_children(home, "entries") == [page, announcement]
    assert (page.slug, announcement.slug) == ("launch", "launch-1")
    assert elsewhere.slug == "launch"
    assert draft.slug == "launch"
