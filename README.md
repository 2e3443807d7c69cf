# anyfind

File name search across the whole disk, from a terminal prompt.

anyfind walks the file system once, builds an index of file names, and then
keeps it current by watching for files being created, renamed and removed.
File names are split into words of letters and digits. Runs of Chinese or
Japanese characters are split into overlapping pairs of characters, so a
query such as `report` or `原神` finds matching names without a dictionary.

## Installing

```
pip install anyfind
```

## Running

```
anyfind
```

On start-up anyfind:

1. opens its settings store (`anything.db`) in your user configuration
   directory, filling in defaults on first run;
2. starts the indexing service in the background, which indexes every
   folder directly under `/`;
3. starts a watcher on `/` which, once the first index is built, adds,
   renames and removes entries as the file system changes;
4. shows a prompt that reads queries and commands from standard input.

Folders skipped while indexing and watching: `/System`, `/bin`, `/dev`,
`/sbin`, `/lib`, `/private`, `/.VolumeIcon.icns`, your music and pictures
folders, and anyfind's own configuration folder.

### Searching

Type a query and press Enter. Separate words are matched independently and
results are ranked by relevance. Put words in double quotes to match them as
a phrase. A query with an unbalanced quote gives no results. At most 100
results are shown. An empty line clears the results.

Each result row shows:

- **Kind**: the file extension, or `folder` / `file` when there is none
  (`unknown` if the file no longer exists)
- **Name** and **Path**
- **Size**, such as `512 B`, `3.4 KB` or `12.3 MB`
- **Last Modified**, as an ISO date

While the first index is still being built, searches print
`index is still being built`.

### Commands

| Command                       | Effect                                                        |
|-------------------------------|---------------------------------------------------------------|
| `:open N`                     | open result row N with the system's default application       |
| `:reveal N`                   | show result row N in the file manager                         |
| `:preview N`                  | preview result row N with Quick Look (`qlmanage`, macOS)       |
| `:sort COLUMN [asc\|desc]`    | sort the results; only `size` and `last_modified_date` reorder |
| `:status`                     | show the indexed file count and indexing progress             |
| `:refresh`                    | mark the index for rebuilding and restart the program          |
| `:help`                       | list the commands                                             |
| `:quit` or `:q`               | leave                                                         |

Row numbers start at 1.

### When the index is rebuilt

At start-up the index is cleared and rebuilt from scratch when:

- it was last built more than fifteen days ago;
- the program version has changed;
- a rebuild was requested with `:refresh`;
- the previous indexing pass did not finish.

## Library use

The parts can also be used on their own:

- `anyfind.vault.Vault` – a small persistent string key/value store
  (`get`, `set`, `batch_set`, `list_all`, `close`). `get` raises `KeyError`
  for a missing key. `init_config` writes the default settings.
- `anyfind.engine.FileIndex` – the name index, stored in SQLite. `add` and
  `delete` are queued and take effect on `commit`; `search` and `num_docs`
  see committed documents only. `tokenize` shows how names are split.
- `anyfind.indexer.Indexer` – walks directories into the index, keeps the
  progress settings in the vault, and fills search hits with name, kind,
  size and date.
- `anyfind.watcher.Sentry` – applies created, renamed and removed paths to
  the index, committing every 1000 changes; `guard` runs it on a directory
  with watchdog.
- `anyfind.table.TableModel` – the result table: columns, cell text,
  sorting and row menus.

```python
from anyfind.vault import Vault, init_config
from anyfind.engine import FileIndex
from anyfind.indexer import Indexer

vault = Vault("settings.db", "index")
init_config(vault)
indexer = Indexer(vault, FileIndex("index"))
indexer.index_files("/home/me/Documents", [], 0)
for hit in indexer.search("invoice"):
    print(hit.kind, hit.name, hit.path)
```

## What anyfind does not do

There is no graphical window: results, status and actions are all at the
terminal prompt. There is no theme or colour switching, and no setting for
which folders to include or exclude other than editing the settings store.
Previewing relies on macOS Quick Look and does nothing useful elsewhere.

## Tests

```
pip install -e ".[test]"
pytest
```