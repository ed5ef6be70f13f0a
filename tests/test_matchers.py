"""
Tests for the matcher chain — one class per rule, plus annotations

Each test builds a WorkspaceIndex by hand with exactly the declarations a
rule depends on, then classifies one word.
"""

import pytest

from runedex.core.index import WorkspaceIndex
from runedex.core.matching import RULES, MatcherChain
from runedex.core.matching.config import get_param_index
from runedex.core.matchtypes import (
    COMMAND, DBTABLE, ENUM, OBJ, PARAM, PROC, QUEUE, MatchType, MatchTypeRegistry,
    declaration, registry,
)
from runedex.core.types import IdentifierText, Location


def put(index, name, match, file, line, lines, column=0):
    return index.symbols.put(name, declaration(match), Location.at(file, line, column),
                             IdentifierText(lines, 0))


def classify(index, line_text, file, needle, line_number=0, offset=0):
    """Classify the word found at `needle` (plus offset) on the line."""
    column = line_text.index(needle) + offset
    return MatcherChain(index).match_word(line_text, line_number, file, column)


@pytest.fixture
def index():
    index = WorkspaceIndex()
    yield index
    index.close()


class TestRuleOrder:
    """The chain is a fixed, ordered tuple."""

    def test_rules_sorted_by_priority(self):
        """Rules run in ascending priority."""
        priorities = [rule.priority for rule in RULES]
        assert priorities == sorted(priorities)
        assert [rule.name for rule in RULES][:3] == ["pack", "literal", "command"]
        assert RULES[-1].name == "parameters"

    def test_null_is_never_matched(self, index):
        """The null literal has no category."""
        assert classify(index, "return(null);", "a.rs2", "null") is None


class TestPackRule:
    """`id=name` lines of .pack files."""

    def test_category_from_file_name(self, index):
        """obj.pack names are OBJ references carrying the pack id."""
        result = classify(index, "995=coins", "/ws/pack/obj.pack", "coins")
        assert result.match.id == "OBJ"
        assert result.annotations.pack_id == "995"

    def test_var_files_are_global_vars(self, index):
        """varp.pack names are GLOBAL_VAR."""
        result = classify(index, "12=quest_points", "/ws/pack/varp.pack", "quest_points")
        assert result.match.id == "GLOBAL_VAR"

    def test_interface_components(self, index):
        """Qualified names in interface.pack are components."""
        result = classify(index, "3=bank_main:deposit", "/ws/pack/interface.pack", "bank_main")
        assert result.match.id == "COMPONENT"
        assert result.word == "bank_main:deposit"


class TestLiteralRule:
    """Shape-only words."""

    def test_coordinates(self, index):
        """Five underscore separated numbers are coordinates."""
        result = classify(index, "p_telejump(0_50_50_22_33);", "a.rs2", "0_50")
        assert result.match.id == "COORDINATES"

    def test_color(self, index):
        """0xRRGGBB is a colour."""
        assert classify(index, "if_setcolour(0xff00ff);", "a.rs2", "0xff").match.id == "COLOR"

    def test_number(self, index):
        """Plain numbers are numbers, even inside a call."""
        assert classify(index, "cost=300", "a.obj", "300").match.id == "NUMBER"


class TestCommandRule:
    """Engine commands."""

    @pytest.fixture
    def with_commands(self, index):
        put(index, "mes", COMMAND, "/ws/engine.rs2", 0, ["[command,mes](string $text)"], 9)
        put(index, "map_clock", COMMAND, "/ws/engine.rs2", 1, ["[command,map_clock]"], 9)
        return index

    def test_invocation(self, with_commands):
        """A known command followed by '(' is a reference."""
        result = classify(with_commands, 'mes("hi");', "/ws/a.rs2", "mes")
        assert result.match.id == "COMMAND"
        assert not result.match.declaration

    def test_declaration_in_engine_file(self, with_commands):
        """The engine header declares the command."""
        result = classify(with_commands, "[command,mes](string $text)", "/ws/engine.rs2", "mes")
        assert result.match.declaration

    def test_command_with_params_needs_parenthesis(self, with_commands):
        """A name that takes parameters but is not called is not the command."""
        assert classify(with_commands, "def_int $x = mes;", "/ws/a.rs2", "mes") is None

    def test_command_without_params(self, with_commands):
        """Parameterless commands match without '('."""
        result = classify(with_commands, "def_int $t = map_clock;", "/ws/a.rs2", "map_clock")
        assert result.match.id == "COMMAND"


class TestLocalVarRule:
    """`$name` words."""

    def test_def_declaration(self, index):
        """def_<type> declares."""
        result = classify(index, "def_int $count = 0;", "a.rs2", "count")
        assert result.match.id == "LOCAL_VAR"
        assert result.match.declaration

    def test_header_parameter(self, index):
        """A bare type keyword also declares."""
        result = classify(index, "[proc,f](obj $item)", "a.rs2", "item")
        assert result.match.declaration

    def test_reference(self, index):
        """Anything else refers."""
        result = classify(index, "$count = calc($count + 1);", "a.rs2", "count", offset=0)
        assert result.match.id == "LOCAL_VAR"
        assert not result.match.declaration


class TestPrevCharRule:
    """Sigil prefixed words."""

    @pytest.mark.parametrize("line, needle, expected", [
        ("mes(^max_coins);", "max_coins", "CONSTANT"),
        ("%quest_points = 1;", "quest_points", "GLOBAL_VAR"),
        ("@skip_dialogue;", "skip_dialogue", "LABEL"),
        ("~add_coins(5);", "add_coins", "PROC"),
        ('~chatplayer("<p,happy>Hi");', "happy", "MESANIM"),
    ])
    def test_sigils(self, index, line, needle, expected):
        """Each sigil maps to its category."""
        assert classify(index, line, "a.rs2", needle).match.id == expected

    def test_constant_declaration(self, index):
        """^name in a .constant file declares."""
        result = classify(index, "^max_coins = 1000", "game.constant", "max_coins")
        assert result.match.id == "CONSTANT"
        assert result.match.declaration


class TestTriggerRule:
    """`[trigger,name]` headers."""

    def test_declaring_trigger(self, index):
        """proc headers declare a PROC."""
        result = classify(index, "[proc,add_coins](int $n)", "a.rs2", "add_coins")
        assert result.match.id == "PROC"
        assert result.match.declaration

    def test_trigger_word(self, index):
        """Word 0 is the trigger itself, with the script name attached."""
        result = classify(index, "[opheld1,coins]", "a.rs2", "opheld1")
        assert result.match.id == "TRIGGER"
        assert result.match.extra_data == {"triggerName": "coins"}

    def test_referencing_trigger(self, index):
        """Interaction triggers refer to their subject."""
        result = classify(index, "[opheld1,coins]", "a.rs2", "coins")
        assert result.match.id == "OBJ"
        assert not result.match.declaration

    def test_category_target(self, index):
        """A leading '_' targets a category and is stripped."""
        result = classify(index, "[oploc1,_bank_booth]", "a.rs2", "_bank_booth")
        assert result.match.id == "CATEGORY"
        assert result.word == "bank_booth"
        assert result.annotations.original_prefix == "_"
        assert result.annotations.start == 9

    def test_unknown_trigger(self, index):
        """Unknown trigger names do not classify the header."""
        assert classify(index, "[nonsense,coins]", "a.rs2", "coins") is None


class TestConfigRule:
    """Config headers and body lines."""

    def test_header_declares(self, index):
        """[name] in an .obj declares an OBJ."""
        result = classify(index, "[coins]", "items.obj", "coins")
        assert result.match.id == "OBJ"
        assert result.match.declaration

    def test_config_key(self, index):
        """Word 0 of a body line is the key."""
        assert classify(index, "name=Coins", "items.obj", "name").match.id == "CONFIG_KEY"

    def test_static_key_param(self, index):
        """walkanim takes four seqs."""
        line = "walkanim=idle,walk_forward,turn,turn_left"
        assert classify(index, line, "guard.npc", "walk_forward").match.id == "SEQ"

    def test_regex_key(self, index):
        """stockN keys of inv files take an obj first."""
        assert classify(index, "stock1=coins,100,10", "shop.inv", "coins").match.id == "OBJ"

    def test_param_past_shape(self, index):
        """A parameter beyond the key's shape has no category."""
        assert classify(index, "category=a,extra", "x.loc", "extra") is None

    def test_param_key(self, index):
        """param=<param>,<value typed by the param>."""
        put(index, "max_reward", PARAM, "game.param", 0, ["[max_reward]", "type=obj"], 1)

        assert classify(index, "param=max_reward,coins", "items.obj", "max_reward").match.id == "PARAM"
        assert classify(index, "param=max_reward,coins", "items.obj", "coins").match.id == "OBJ"

    def test_val_key(self, index):
        """val=<input>,<output> typed by the enclosing enum."""
        put(index, "rewards", ENUM, "r.enum", 0, ["[rewards]", "inputtype=int", "outputtype=obj"], 1)

        result = classify(index, "val=1,coins", "r.enum", "coins", line_number=3)
        assert result.match.id == "OBJ"

    def test_data_key(self, index):
        """data=<column>,<fields typed by the column>."""
        put(index, "quests", DBTABLE, "q.dbtable", 0, ["[quests]"], 1)
        index.symbols.put("quests:reward", declaration(registry.get("DBCOLUMN")),
                          Location.at("q.dbtable", 1, 7),
                          IdentifierText(["column=reward,int,obj"], 0))
        index.symbols.put("cook", declaration(registry.get("DBROW")), Location.at("q.dbrow", 0, 1),
                          IdentifierText(["[cook]", "table=quests"], 0))

        line = "data=reward,3,coins"
        column = classify(index, line, "q.dbrow", "reward", line_number=2)
        assert column.match.id == "DBCOLUMN"
        assert column.word == "quests:reward"
        assert classify(index, line, "q.dbrow", "coins", line_number=2).match.id == "OBJ"


class TestParamIndex:
    """Comma counting in config lines."""

    def test_key_is_part_of_first_param(self):
        """The key and the first value share index 0."""
        assert get_param_index("walkanim=a,b", 3) == 0
        assert get_param_index("walkanim=a,b", 9) == 0
        assert get_param_index("walkanim=a,b", 11) == 1

    def test_escaped_comma(self):
        """An escaped comma does not separate."""
        line = "name=a\\,b,c"
        assert get_param_index(line, line.index("c")) == 1


class TestMapRule:
    """Map files."""

    def test_section_type(self, index):
        """Words take the type of the enclosing section."""
        index.map_lines.put(1, "LOC", "m50_50.jm2")
        result = classify(index, "0 10 10: wall_door", "m50_50.jm2", "wall_door", line_number=2)
        assert result.match.id == "LOC"

    def test_section_name(self, index):
        """Section titles are nothing."""
        result = classify(index, "==== LOC ====", "m50_50.jm2", "LOC")
        assert result.match.id == "UNKNOWN"

    def test_outside_section(self, index):
        """Without a section the word is nothing."""
        result = classify(index, "0 10 10: wall_door", "m50_50.jm2", "wall_door")
        assert result.match.id == "UNKNOWN"


class TestSwitchCaseRule:
    """Case values."""

    def test_case_value(self, index):
        """Case values take the switch operand type."""
        index.switch_lines.put(2, "OBJ", "a.rs2")
        result = classify(index, '    case coins : mes("x");', "a.rs2", "coins", line_number=3)
        assert result.match.id == "OBJ"

    def test_unresolved_switch(self, index):
        """Without a switch breakpoint the value is nothing."""
        result = classify(index, "    case coins : return;", "a.rs2", "coins", line_number=3)
        assert result.match.id == "UNKNOWN"

    def test_default(self, index):
        """The default case is not a value."""
        index.switch_lines.put(0, "OBJ", "a.rs2")
        assert classify(index, "    case default : return;", "a.rs2", "default", line_number=1) is None


class TestParametersRule:
    """Arguments of calls in scripts."""

    @pytest.fixture
    def with_signatures(self, index):
        put(index, "inv_add", COMMAND, "engine.rs2", 0, ["[command,inv_add](inv $inv, obj $obj, int $n)"], 9)
        put(index, "queue", COMMAND, "engine.rs2", 1, ["[command,queue](queue $queue, int $delay)"], 9)
        put(index, "give", PROC, "a.rs2", 0, ["[proc,give](obj $item)(obj)"], 6)
        put(index, "bank_queue", QUEUE, "a.rs2", 5, ["[queue,bank_queue](obj $item)"], 7)
        return index

    def test_command_argument(self, with_signatures):
        """The argument position picks the signature type."""
        line = "inv_add(inv, coins, 1);"
        assert classify(with_signatures, line, "b.rs2", "inv,").match.id == "INV"
        assert classify(with_signatures, line, "b.rs2", "coins").match.id == "OBJ"

    def test_proc_argument(self, with_signatures):
        """~proc( uses the proc signature."""
        assert classify(with_signatures, "~give(coins);", "b.rs2", "coins").match.id == "OBJ"

    def test_queue_arguments(self, with_signatures):
        """queue(name, delay, ...) takes its tail from the named queue."""
        line = "queue(bank_queue, 0, coins);"
        assert classify(with_signatures, line, "b.rs2", "bank_queue").match.id == "QUEUE"
        assert classify(with_signatures, line, "b.rs2", "coins").match.id == "OBJ"

    def test_return_argument(self, with_signatures):
        """return( uses the return types of the enclosing script."""
        with_signatures.return_lines.put(1, "givePROC", "a.rs2")
        result = classify(with_signatures, "return(coins);", "a.rs2", "coins", line_number=3)
        assert result.match.id == "OBJ"

    def test_unknown_call(self, with_signatures):
        """Arguments of unknown calls have no category."""
        assert classify(with_signatures, "nothing(coins);", "b.rs2", "coins") is None


class TestAnnotations:
    """Word rewrites after a match."""

    def test_cert_prefix_stripped(self, index):
        """cert_ objs refer to the base obj."""
        put(index, "inv_add", COMMAND, "engine.rs2", 0, ["[command,inv_add](inv $inv, obj $obj, int $n)"], 9)
        result = classify(index, "inv_add(inv, cert_gold_bar, 1);", "b.rs2", "cert_")
        assert result.word == "gold_bar"
        assert result.annotations.cert
        assert result.annotations.original_prefix == "cert_"
        assert result.annotations.start == 18

    def test_component_qualified(self, index):
        """Components declared in an .if file take the interface name."""
        result = classify(index, "[deposit_button]", "/ws/bank_main.if", "deposit_button")
        assert result.match.id == "COMPONENT"
        assert result.word == "bank_main:deposit_button"
        assert result.annotations.modified_word

    def test_column_without_table(self, index):
        """A db column with no enclosing table does not match."""
        assert classify(index, "column=points,int", "q.dbtable", "points", line_number=1) is None

    def test_column_qualified(self, index):
        """Columns take the name of the table above them."""
        put(index, "quests", DBTABLE, "q.dbtable", 0, ["[quests]"], 1)
        result = classify(index, "column=points,int", "q.dbtable", "points", line_number=1)
        assert result.word == "quests:points"
        assert result.match.declaration

    def test_model_suffix(self, index):
        """Loc model shape suffixes are stripped."""
        result = classify(index, "model=wall_0", "door.loc", "wall_0")
        assert result.match.id == "MODEL"
        assert result.word == "wall"
        assert result.annotations.original_suffix == "_0"

    def test_match_words(self, index):
        """Every word of a line gets an entry."""
        results = MatcherChain(index).match_words("[proc,f](obj $item)", 0, "a.rs2")
        assert len(results) == 4
        assert results[1].match.id == "PROC"


class TestRegistry:
    """Match type registry."""

    def test_keywords(self):
        """Type keywords map to match type ids."""
        assert registry.data_type_to_match_id("namedobj") == "OBJ"
        assert registry.data_type_to_match_id("int") == "UNKNOWN"
        assert registry.resolve("dbcolumn").id == "DBCOLUMN"

    def test_keyword_conflict(self):
        """A keyword cannot belong to two match types."""
        local = MatchTypeRegistry()
        local.register(OBJ)
        with pytest.raises(ValueError):
            local.register(MatchType(id="OTHER", types=("obj",)))

    def test_declaring_file_types(self):
        """Reference-only file types are not indexed."""
        file_types = registry.declaring_file_types()
        assert {"rs2", "obj", "dbtable", "if", "constant"} <= file_types
        assert "ob2" not in file_types
        assert "mid" not in file_types
