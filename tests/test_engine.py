import pytest

from anyfind.engine import (
    FileIndex,
    QuerySyntaxError,
    get_files,
    get_subfolders,
    tokenize,
)

TEXTS = [
    "中文的原神.txt",
    "你好世界.docx",
    "这是一个测试文档.pdf",
    "北京欢迎你.md",
    "今天天气怎么样.txt",
    "我喜欢学习编程.rs",
    "人工智能的未来.html",
    "chinese_game_genshin.txt",
    "hello_world_demo.docx",
    "this_is_test_document.pdf",
    "welcome_to_beijing.md",
    "how_is_weather_today.txt",
    "i_love_learning_programming.rs",
    "future_of_artificial_intelligence.html",
]


@pytest.fixture
def index(tmp_path):
    with FileIndex(tmp_path / "idx") as idx:
        yield idx


@pytest.fixture
def mixed_index(index):
    for text in TEXTS:
        index.add(text, "/docs/" + text)
    index.commit()
    return index


def paths(results):
    return [item.path for item in results]


def test_tokenize_english_words():
    text = "Wins Come All Day Under Mickey Mouse.pdf"
    assert tokenize(text) == ["Wins", "Come", "All", "Day", "Under", "Mickey", "Mouse", "pdf"]


def test_tokenize_splits_on_separators():
    assert tokenize("hello_world-demo.docx") == ["hello", "world", "demo", "docx"]


def test_tokenize_chinese_contains_word():
    tokens = tokenize("人工智能的未来.html")
    assert "未来" in tokens
    assert tokens[-1] == "html"


def test_tokenize_only_punctuation_is_empty():
    assert tokenize("._- #") == []


def test_search_chinese(mixed_index):
    assert paths(mixed_index.search("未来")) == ["/docs/人工智能的未来.html"]


def test_search_english(mixed_index):
    assert paths(mixed_index.search("world")) == ["/docs/hello_world_demo.docx"]


def test_search_result_carries_only_path(mixed_index):
    [hit] = mixed_index.search("原神")
    assert hit.path == "/docs/中文的原神.txt"
    assert hit.name == ""
    assert hit.size == 0.0


def test_search_phrase_requires_order(mixed_index):
    assert paths(mixed_index.search('"hello world"')) == ["/docs/hello_world_demo.docx"]
    assert mixed_index.search('"world hello"') == []


def test_search_unbalanced_quote_raises(mixed_index):
    with pytest.raises(QuerySyntaxError):
        mixed_index.search('"hello')


def test_search_empty_query(mixed_index):
    assert mixed_index.search("  ...  ") == []


def test_search_limit(index):
    for n in range(5):
        index.add(f"report_{n}.txt", f"/r/report_{n}.txt")
    index.commit()
    assert len(index.search("report", 3)) == 3
    assert len(index.search("report")) == 5


def test_uncommitted_changes_invisible(index):
    index.add("a.txt", "/a.txt")
    assert index.num_docs() == 0
    assert index.search("a") == []
    index.commit()
    assert index.num_docs() == 1
    assert paths(index.search("a")) == ["/a.txt"]


def test_delete(mixed_index):
    total = mixed_index.num_docs()
    mixed_index.delete("/docs/hello_world_demo.docx")
    mixed_index.commit()
    assert mixed_index.num_docs() == total - 1
    assert mixed_index.search("world") == []


def test_duplicate_paths_all_deleted(index):
    index.add("rust_duplicate.pdf", "/t/rust_duplicate.pdf")
    index.commit()
    index.add("rust_duplicate.pdf", "/t/rust_duplicate.pdf")
    index.commit()
    assert index.num_docs() == 2
    index.delete("/t/rust_duplicate.pdf")
    index.commit()
    assert index.num_docs() == 0


def test_operations_apply_in_order(index):
    index.add("x.txt", "/x.txt")
    index.delete("/x.txt")
    index.delete("/y.txt")
    index.add("y.txt", "/y.txt")
    index.commit()
    assert [path for _, path in index.list_all()] == ["/y.txt"]


def test_list_all_ids_increase(mixed_index):
    entries = mixed_index.list_all()
    ids = [doc_id for doc_id, _ in entries]
    assert ids == sorted(ids)
    assert [path for _, path in entries] == ["/docs/" + text for text in TEXTS]


def test_persistence(tmp_path):
    with FileIndex(tmp_path / "p") as idx:
        idx.add("genshin.pdf", "/g/genshin.pdf")
        idx.commit()
        idx.add("lost.pdf", "/g/lost.pdf")
    with FileIndex(tmp_path / "p") as idx:
        assert idx.num_docs() == 1
        assert paths(idx.search("genshin")) == ["/g/genshin.pdf"]


def test_get_files_respects_excludes(tmp_path):
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / ".hidden").write_text("h")
    (tmp_path / "skip").mkdir()
    (tmp_path / "skip" / "inner.txt").write_text("s")
    (tmp_path / "keep").mkdir()
    (tmp_path / "keep" / "inner.txt").write_text("k")

    entries = list(get_files(tmp_path, [str(tmp_path / "skip")]))
    found = {entry.path for entry in entries}

    assert entries[0].path == str(tmp_path)
    assert entries[0].name == tmp_path.name
    assert str(tmp_path / "skip") in found
    assert str(tmp_path / "skip" / "inner.txt") not in found
    assert str(tmp_path / "keep" / "inner.txt") in found
    assert str(tmp_path / ".hidden") in found
    assert len(entries) == len(found) == 6


def test_get_files_directory_flags(tmp_path):
    (tmp_path / "d").mkdir()
    (tmp_path / "f.txt").write_text("f")
    flags = {e.name: e.is_dir for e in get_files(tmp_path, [])}
    assert flags["d"] is True
    assert flags["f.txt"] is False


def test_get_subfolders(tmp_path):
    (tmp_path / "one").mkdir()
    (tmp_path / "two.txt").write_text("x")
    assert sorted(get_subfolders(tmp_path)) == sorted(
        [str(tmp_path / "one"), str(tmp_path / "two.txt")]
    )


def test_get_subfolders_missing(tmp_path):
    assert get_subfolders(tmp_path / "missing") == []