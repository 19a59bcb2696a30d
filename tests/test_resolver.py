"""Tests for the item walk and companion resolution."""

from __future__ import annotations

from mediare.config import (
    Action,
    CompanionConfig,
    ItemKind,
    ItemNode,
    MatchedFile,
    ProjectKind,
    ProjectNode,
)
from mediare.resolver import find_matches, iter_project_items, resolve


def _file(path: str | None, kind: ItemKind = ItemKind.FILE, *children: ItemNode) -> ItemNode:
    name = path.rsplit("/", 1)[-1] if path else ""
    return ItemNode(name=name, kind=kind, file_paths=[path], children=list(children))


def _dir(path: str, *children: ItemNode, kind: ItemKind = ItemKind.FOLDER) -> ItemNode:
    return ItemNode(
        name=path.rsplit("/", 1)[-1], kind=kind, file_paths=[path], children=list(children),
    )


class TestIterProjectItems:
    def test_descendants_before_parent(self):
        designer = _file("/p/Form.Designer.cs")
        form = _file("/p/Form.cs", ItemKind.FILE, designer)
        project = ProjectNode(name="P", items=[_dir("/p/Forms", form), _file("/p/Root.cs")])

        paths = [m.full_path for m in iter_project_items(project)]
        assert paths == ["/p/Form.Designer.cs", "/p/Form.cs", "/p/Root.cs"]

    def test_folders_not_emitted(self):
        project = ProjectNode(name="P", items=[
            _dir("/p/Handlers", _file("/p/Handlers/A.cs")),
            _dir("/p/Virtual", _file("/p/Virtual/B.cs"), kind=ItemKind.VIRTUAL_FOLDER),
        ])
        paths = [m.full_path for m in iter_project_items(project)]
        assert paths == ["/p/Handlers/A.cs", "/p/Virtual/B.cs"]

    def test_other_kind_treated_as_file(self):
        project = ProjectNode(name="P", items=[_file("/p/Product.wxs", ItemKind.OTHER)])
        assert [m.filename for m in iter_project_items(project)] == ["Product.wxs"]

    def test_skipped_endings(self):
        project = ProjectNode(name="Native", items=[
            _file("/n/main.cpp"),
            _file("/n/Native.vcxproj.filters"),
            _file("/n/Native.vcxproj"),
        ])
        assert [m.filename for m in iter_project_items(project)] == ["main.cpp"]

    def test_custom_skip_list(self):
        config = CompanionConfig(skip_suffixes=(".g.cs",))
        project = ProjectNode(name="P", items=[_file("/p/A.g.cs"), _file("/p/A.cs")])
        assert [m.filename for m in iter_project_items(project, config)] == ["A.cs"]

    def test_absent_first_path_skips_item_not_walk(self):
        item = ItemNode(name="A.xaml", file_paths=[None, "/p/A.xaml.cs"])
        project = ProjectNode(name="P", items=[item, _file(None), _file("/p/B.cs")])
        assert [m.full_path for m in iter_project_items(project)] == ["/p/B.cs"]

    def test_first_path_is_the_candidate(self):
        item = ItemNode(name="A.xaml", file_paths=["/p/A.xaml", "/p/A.xaml.cs"])
        project = ProjectNode(name="P", items=[item])
        assert [m.full_path for m in iter_project_items(project)] == ["/p/A.xaml"]

    def test_raw_kind_identifiers(self):
        project = ProjectNode(name="P", items=[
            ItemNode(
                name="Handlers",
                kind="{6BB5F8EF-4483-11D3-8BCF-00C04F8EC28C}",
                file_paths=["/p/Handlers"],
                children=[ItemNode(
                    name="A.cs",
                    kind="{6BB5F8EE-4483-11D3-8BCF-00C04F8EC28C}",
                    file_paths=["/p/Handlers/A.cs"],
                )],
            ),
            ItemNode(name="Product.wxs", kind="WixExtension", file_paths=["/p/Product.wxs"]),
        ])
        paths = [m.full_path for m in iter_project_items(project)]
        assert paths == ["/p/Handlers/A.cs", "/p/Product.wxs"]

    def test_project_name_recorded(self):
        project = ProjectNode(name="Orders.Api", items=[_file("/p/A.cs")])
        assert next(iter_project_items(project)).project_name == "Orders.Api"

    def test_none_items_ignored(self):
        project = ProjectNode(name="P", items=[None, _file("/p/A.cs")])
        assert len(list(iter_project_items(project))) == 1


class TestFindMatches:
    def test_exact_case_sensitive(self):
        project = ProjectNode(name="P", items=[
            _file("/p/orderhandler.cs"), _file("/p/OrderHandler.cs"),
        ])
        matches = find_matches("OrderHandler.cs", [project])
        assert list(matches) == ["/p/OrderHandler.cs"]

    def test_dedup_by_full_path_first_wins(self):
        first = ProjectNode(name="First", items=[_file("/shared/OrderHandler.cs")])
        second = ProjectNode(name="Second", items=[_file("/shared/OrderHandler.cs")])
        matches = find_matches("OrderHandler.cs", [first, second])
        assert matches == {
            "/shared/OrderHandler.cs": MatchedFile("OrderHandler.cs", "First", "/shared/OrderHandler.cs"),
        }

    def test_no_match(self):
        project = ProjectNode(name="P", items=[_file("/p/A.cs")])
        assert find_matches("B.cs", [project]) == {}


class TestResolve:
    def test_command_opens_single_handler(self):
        project = ProjectNode(name="Orders", items=[
            _dir("/src/Commands", _file("/src/Commands/OrderCommand.cs")),
            _dir("/src/Handlers", _file("/src/Handlers/OrderHandler.cs")),
        ])
        resolution = resolve("OrderCommand.cs", [project])

        assert resolution.target_filename == "OrderHandler.cs"
        assert resolution.count == 1
        assert resolution.action is Action.OPEN
        assert resolution.open_path == "/src/Handlers/OrderHandler.cs"

    def test_view_model_reports_two_mappers(self):
        api = ProjectNode(name="Api", items=[_file("/api/CustomerMapper.cs")])
        web = ProjectNode(name="Web", items=[_file("/web/CustomerMapper.cs")])
        resolution = resolve("CustomerViewModel.cs", [api, web])

        assert resolution.target_filename == "CustomerMapper.cs"
        assert resolution.action is Action.REPORT
        assert resolution.count == 2
        assert {m.project_name for m in resolution.matches.values()} == {"Api", "Web"}

    def test_unrecognised_name_matches_itself(self):
        a = ProjectNode(name="A", items=[_file("/a/Utility.cs")])
        b = ProjectNode(name="B", items=[_file("/b/Utility.cs"), _file("/b/Other.cs")])
        resolution = resolve("Utility.cs", [a, b])

        assert resolution.target_filename == "Utility.cs"
        assert set(resolution.matches) == {"/a/Utility.cs", "/b/Utility.cs"}

    def test_multi_path_item_opens_once(self):
        item = ItemNode(
            name="OrderHandler.cs",
            file_paths=["/a/OrderHandler.cs", "/b/OrderHandler.cs"],
        )
        resolution = resolve("OrderCommand.cs", [ProjectNode(name="P", items=[item])])
        assert resolution.action is Action.OPEN
        assert resolution.open_path == "/a/OrderHandler.cs"

    def test_raw_solution_folder_guid_enumerated(self):
        orders = ProjectNode(name="Orders", items=[_file("/o/OrderHandler.cs")])
        folder = ProjectNode(
            name="src",
            kind="{66A26720-8FB5-11D2-AA7E-00C04F688DDE}",
            items=[ItemNode(name="Orders", kind="Other", sub_project=orders)],
        )
        resolution = resolve("OrderCommand.cs", [folder])
        assert resolution.open_path == "/o/OrderHandler.cs"

    def test_zero_matches_reports(self):
        resolution = resolve("OrderCommand.cs", [ProjectNode(name="Empty")])
        assert resolution.target_filename == "OrderHandler.cs"
        assert resolution.action is Action.REPORT
        assert resolution.count == 0

    def test_non_source_document_skipped(self):
        project = ProjectNode(name="P", items=[_file("/p/Readme.md")])
        resolution = resolve("Readme.md", [project])
        assert resolution.target_filename is None
        assert resolution.matches == {}
        assert resolution.action is Action.SKIP

    def test_absent_document_skipped(self):
        assert resolve(None, []).action is Action.SKIP

    def test_solution_folder_walked_without_duplicates(self):
        api = ProjectNode(name="Api", items=[_file("/api/Utility.cs")])
        web = ProjectNode(name="Web", items=[_dir("/web/Lib", _file("/web/Lib/Utility.cs"))])
        folder = ProjectNode(
            name="src",
            kind=ProjectKind.SOLUTION_FOLDER,
            items=[
                ItemNode(name="Api", kind=ItemKind.OTHER, sub_project=api),
                ItemNode(name="Web", kind=ItemKind.OTHER, sub_project=web),
                _file("/docs/Utility.cs"),
            ],
        )
        resolution = resolve("Utility.cs", [folder])

        assert set(resolution.matches) == {"/api/Utility.cs", "/web/Lib/Utility.cs", "/docs/Utility.cs"}
        assert resolution.matches["/docs/Utility.cs"].project_name == "src"

    def test_idempotent(self):
        api = ProjectNode(name="Api", items=[_file("/api/CustomerMapper.cs")])
        web = ProjectNode(name="Web", items=[_file("/web/CustomerMapper.cs")])
        first = resolve("CustomerViewModel.cs", [api, web])
        second = resolve("CustomerViewModel.cs", [api, web])
        assert set(first.matches.values()) == set(second.matches.values())

    def test_filter_and_folder_invariants(self):
        project = ProjectNode(name="P", items=[
            _dir("/p/Utility.cs", _file("/p/Utility.cs/Utility.cs")),
            _file("/p/Utility.cs.vcxproj"),
        ])
        config = CompanionConfig(skip_suffixes=(".vcxproj.filters", ".vcxproj"))
        resolution = resolve("Utility.cs", [project], config)

        assert list(resolution.matches) == ["/p/Utility.cs/Utility.cs"]
        for match in resolution.matches.values():
            assert not match.full_path.endswith(config.skip_suffixes)
