"""Tests for slash command and @mention parsing."""

import pytest

from conotate.classification.commands import find_section_by_name, parse_commands
from conotate.models import Section, SectionRef


@pytest.fixture
def with_recipes(sections):
    return [*sections, Section(id="recipes-1712000000", name="Recipes")]


class TestSlashCommands:
    def test_task_command(self, sections):
        parsed = parse_commands("/task call the dentist", sections)
        assert parsed.forced_category == "tasks"
        assert parsed.clean_text == "call the dentist"
        assert parsed.section_name is None

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("/idea robot butler", "ideas"),
            ("/ideas robot butler", "ideas"),
            ("/NOTE meeting at 3pm", "notes"),
            ("/Tasks get eggs", "tasks"),
        ],
    )
    def test_variants_are_case_insensitive(self, sections, text, expected):
        assert parse_commands(text, sections).forced_category == expected

    def test_leading_whitespace_is_trimmed(self, sections):
        parsed = parse_commands("   /note  remember the milk  ", sections)
        assert parsed.forced_category == "notes"
        assert parsed.clean_text == "remember the milk"

    def test_bare_command_leaves_empty_text(self, sections):
        parsed = parse_commands("/task", sections)
        assert parsed.forced_category == "tasks"
        assert parsed.clean_text == ""

    def test_command_needs_word_boundary(self, sections):
        parsed = parse_commands("/taskrabbit is hiring", sections)
        assert parsed.forced_category is None
        assert parsed.clean_text == "/taskrabbit is hiring"

    def test_command_must_be_at_start(self, sections):
        parsed = parse_commands("remember /task later", sections)
        assert parsed.forced_category is None

    def test_slash_wins_over_mention(self, with_recipes):
        parsed = parse_commands("/idea @Recipes fusion tacos", with_recipes)
        assert parsed.forced_category == "ideas"
        assert parsed.clean_text == "@Recipes fusion tacos"


class TestMentions:
    def test_mention_of_existing_section(self, with_recipes):
        parsed = parse_commands("@Recipes pasta carbonara", with_recipes)
        assert parsed.forced_category == "recipes-1712000000"
        assert parsed.clean_text == "pasta carbonara"
        assert parsed.section_name == "Recipes"

    def test_mention_is_case_insensitive(self, with_recipes):
        parsed = parse_commands("@recipes pasta", with_recipes)
        assert parsed.forced_category == "recipes-1712000000"

    def test_mention_later_in_text(self, with_recipes):
        parsed = parse_commands("remember @Recipes add more salt", with_recipes)
        assert parsed.forced_category == "recipes-1712000000"
        assert parsed.clean_text == "add more salt"

    def test_unknown_section_is_reported_not_forced(self, sections):
        parsed = parse_commands("@Travel pack the bags", sections)
        assert parsed.forced_category is None
        assert parsed.section_name == "Travel"
        assert parsed.clean_text == "@Travel pack the bags"

    def test_mention_without_content_is_plain_text(self, with_recipes):
        parsed = parse_commands("@Recipes", with_recipes)
        assert parsed.forced_category is None
        assert parsed.section_name is None
        assert parsed.clean_text == "@Recipes"

    def test_works_with_section_refs(self):
        refs = [SectionRef(id="work-1", name="Work")]
        assert parse_commands("@work ship it", refs).forced_category == "work-1"


def test_plain_text_is_trimmed(sections):
    parsed = parse_commands("  just a thought \n", sections)
    assert parsed.clean_text == "just a thought"
    assert parsed.forced_category is None
    assert parsed.section_name is None


def test_find_section_by_name(sections):
    assert find_section_by_name("IDEAS", sections).id == "ideas"
    assert find_section_by_name("Groceries", sections) is None
