"""Tests for the wizard engine state machine."""

import pytest
from decimal import Decimal

from property_intake.config import WizardSettings
from property_intake.models.conversation import (
    Accepted,
    FieldKind,
    QuestionSpec,
    TranscriptRole,
)
from property_intake.wizard import (
    MORTGAGE_QUESTIONS,
    PROPERTY_QUESTIONS,
    WizardEngine,
    WizardStateError,
    is_completed,
)
from property_intake.wizard.normalizers import parse_text


SETTINGS = WizardSettings()


def property_engine() -> WizardEngine:
    engine = WizardEngine(PROPERTY_QUESTIONS, settings=SETTINGS, name="property")
    engine.start()
    return engine


def advance_to(engine: WizardEngine, field_id: str) -> None:
    """Answer questions with valid values until `field_id` is active."""
    answers = {
        "name": "Duplex Ontario",
        "address": "123 rue Principale, Montréal",
        "acquisition_date": "2022-03-15",
        "purchase_price": "250000",
        "current_value": "300000",
        "notes": "Deux logements",
    }
    while engine.current_question.field_id != field_id:
        engine.submit(answers[engine.current_question.field_id])


class TestStart:
    """Tests for start()."""

    def test_intro_then_first_prompt(self):
        """Test the conversation opens with the intro and the first question."""
        engine = property_engine()
        state = engine.state

        assert state.step_index == 0
        assert state.completed is False
        assert [e.role for e in state.transcript] == [
            TranscriptRole.ASSISTANT,
            TranscriptRole.ASSISTANT,
        ]
        assert state.transcript[0].text == SETTINGS.intro_message
        assert state.transcript[1].text == PROPERTY_QUESTIONS[0].prompt_text

    def test_restart_discards_previous_run(self):
        """Test start() begins a new conversation."""
        engine = property_engine()
        first = engine.state
        engine.submit("Duplex Ontario")

        second = engine.start()

        assert second.conversation_id != first.conversation_id
        assert second.step_index == 0
        assert engine.record() == {}


class TestScenarios:
    """Concrete conversation scenarios."""

    def test_whitespace_name_rejected(self):
        """Test a blank mandatory name is rejected in place."""
        engine = property_engine()
        state = engine.submit("  ")

        assert state.step_index == 0
        assert state.transcript[-2].role == TranscriptRole.USER
        assert state.transcript[-2].text == SETTINGS.empty_answer_placeholder
        assert state.transcript[-1].role == TranscriptRole.ASSISTANT
        assert "« Nom » est obligatoire" in state.transcript[-1].text
        assert "name" not in state.accumulated_record

    def test_name_accepted(self):
        """Test a valid name is stored and the next question is asked."""
        engine = property_engine()
        state = engine.submit("Duplex Ontario")

        assert state.step_index == 1
        assert state.accumulated_record["name"] == "Duplex Ontario"
        assert state.transcript[-2].text == "Duplex Ontario"
        assert state.transcript[-1].text == PROPERTY_QUESTIONS[1].prompt_text

    def test_day_first_date_normalized(self):
        """Test 15/03/2022 is stored as 2022-03-15."""
        engine = property_engine()
        advance_to(engine, "acquisition_date")
        step = engine.state.step_index

        state = engine.submit("15/03/2022")

        assert state.accumulated_record["acquisition_date"] == "2022-03-15"
        assert state.step_index == step + 1

    def test_impossible_date_rejected(self):
        """Test 31/02/2022 is rejected with format guidance."""
        engine = property_engine()
        advance_to(engine, "acquisition_date")
        step = engine.state.step_index

        state = engine.submit("31/02/2022")

        assert state.step_index == step
        assert "AAAA-MM-JJ" in state.transcript[-1].text
        assert "acquisition_date" not in state.accumulated_record

    def test_optional_value_skipped(self):
        """Test « passer » leaves an optional field absent with a note."""
        engine = property_engine()
        advance_to(engine, "current_value")
        step = engine.state.step_index

        state = engine.submit("passer")

        assert state.step_index == step + 1
        assert "current_value" not in state.accumulated_record
        assert state.transcript[-3].text == "passer"
        assert state.transcript[-2].text == SETTINGS.skip_acknowledgement
        assert state.transcript[-1].text == PROPERTY_QUESTIONS[step + 1].prompt_text

    def test_final_answer_produces_summary(self):
        """Test the last answer completes the wizard with a summary."""
        engine = property_engine()
        engine.submit("Duplex Ontario")
        engine.skip_current()
        engine.submit("15/03/2022")
        engine.submit("250 000 $")
        engine.submit("je ne sais pas")
        state = engine.submit("")

        assert state.completed is True
        assert is_completed(state)
        assert state.step_index == state.total_steps

        summary = state.transcript[-1]
        assert summary.role == TranscriptRole.SUMMARY
        lines = summary.text.splitlines()
        assert "- Nom : Duplex Ontario" in lines
        assert "- Adresse : —" in lines
        assert "- Date d'acquisition : 2022-03-15" in lines
        assert "- Prix d'achat : 250\u00a0000,00\u00a0$" in lines
        assert "- Valeur actuelle : —" in lines
        assert "- Notes : —" in lines

        assert engine.record() == {
            "name": "Duplex Ontario",
            "acquisition_date": "2022-03-15",
            "purchase_price": Decimal("250000.00"),
        }


class TestProperties:
    """Invariants that hold for every question table."""

    @pytest.mark.parametrize("questions", [PROPERTY_QUESTIONS, MORTGAGE_QUESTIONS])
    @pytest.mark.parametrize("raw", ["", "   ", "passer", "je ne sais pas", "N/A"])
    def test_mandatory_questions_reject_blank_and_skip(self, questions, raw):
        """Test blanks and skip phrases never advance a mandatory question."""
        for index, question in enumerate(questions):
            if question.is_optional:
                continue
            engine = WizardEngine(questions, settings=SETTINGS)
            engine.start()
            for earlier in questions[:index]:
                engine.submit(_valid_answer(earlier))
            assert engine.state.step_index == index

            engine.submit(raw)
            assert engine.state.step_index == index
            assert question.field_id not in engine.state.accumulated_record

    @pytest.mark.parametrize("raw", ["", "passer", "Je sais pas", "skip", "plus tard"])
    def test_optional_questions_accept_skip(self, raw):
        """Test skip phrases advance an optional question by exactly one."""
        for index, question in enumerate(PROPERTY_QUESTIONS):
            if not question.is_optional:
                continue
            engine = WizardEngine(PROPERTY_QUESTIONS, settings=SETTINGS)
            engine.start()
            for earlier in PROPERTY_QUESTIONS[:index]:
                engine.submit(_valid_answer(earlier))

            outcome = engine.evaluate(question, raw)
            assert outcome == Accepted(value=None, note=SETTINGS.skip_acknowledgement)

            engine.submit(raw)
            assert engine.state.step_index == index + 1
            assert question.field_id not in engine.state.accumulated_record

    def test_submit_after_completion_is_noop(self):
        """Test late submissions leave a completed state untouched."""
        engine = property_engine()
        for question in PROPERTY_QUESTIONS:
            engine.submit(_valid_answer(question))
        state = engine.state
        assert state.completed

        transcript = list(state.transcript)
        record = dict(state.accumulated_record)

        assert engine.submit("encore une réponse") is state
        assert engine.skip_current() is state
        assert state.transcript == transcript
        assert state.accumulated_record == record
        assert engine.current_question is None

    def test_step_index_is_monotonic(self):
        """Test the step only moves forward, one accepted answer at a time."""
        engine = property_engine()
        answers = [
            "", "Duplex Ontario", "Duplex Ontario",
            "123 rue Principale",
            "31/02/2022", "hier", "15/03/2022",
            "beaucoup", "-5", "250 000",
            "passer",
            "",
        ]
        previous = engine.state.step_index
        for answer in answers:
            if engine.state.completed:
                break
            before_record = dict(engine.state.accumulated_record)
            before_transcript = len(engine.state.transcript)
            engine.submit(answer)
            step = engine.state.step_index

            assert step in (previous, previous + 1)
            if step == previous:
                assert engine.state.accumulated_record == before_record
                assert len(engine.state.transcript) == before_transcript + 2
            previous = step

        assert engine.state.completed

    def test_skip_current_on_mandatory_is_rejected(self):
        """Test the skip button cannot bypass a mandatory question."""
        engine = property_engine()
        state = engine.skip_current()

        assert state.step_index == 0
        assert state.transcript[-2].text == SETTINGS.skip_command
        assert "obligatoire" in state.transcript[-1].text


class TestConfiguration:
    """Tests for engine construction and settings."""

    def test_empty_table_rejected(self):
        """Test an engine needs at least one question."""
        with pytest.raises(WizardStateError):
            WizardEngine([], settings=SETTINGS)

    def test_duplicate_field_ids_rejected(self):
        """Test field ids must be unique."""
        with pytest.raises(WizardStateError):
            WizardEngine(
                [PROPERTY_QUESTIONS[0], PROPERTY_QUESTIONS[0]],
                settings=SETTINGS,
            )

    def test_submit_before_start(self):
        """Test driving an engine before start() fails loudly."""
        engine = WizardEngine(PROPERTY_QUESTIONS, settings=SETTINGS)
        with pytest.raises(WizardStateError):
            engine.submit("Duplex Ontario")
        with pytest.raises(WizardStateError):
            engine.state

    def test_wizard_state_error_is_assertion(self):
        """Test construction bugs surface as assertion failures."""
        assert issubclass(WizardStateError, AssertionError)

    def test_extra_skip_phrases(self):
        """Test configured phrases skip optional questions."""
        settings = WizardSettings(extra_skip_phrases="Bof, Aucune")
        engine = WizardEngine(PROPERTY_QUESTIONS, settings=settings)
        engine.start()
        engine.submit("Duplex Ontario")

        state = engine.submit("bof")

        assert state.step_index == 2
        assert "address" not in state.accumulated_record

    def test_custom_skip_command(self):
        """Test skip_current() submits the configured command."""
        settings = WizardSettings(skip_command="  Suivant ")
        engine = WizardEngine(PROPERTY_QUESTIONS, settings=settings)
        engine.start()
        engine.submit("Duplex Ontario")

        state = engine.skip_current()

        assert state.transcript[-3].text == "suivant"
        assert state.transcript[-2].text == settings.skip_acknowledgement
        assert state.step_index == 2
        assert "address" not in state.accumulated_record

    def test_custom_skip_command_on_mandatory(self):
        """Test the configured command is refused by a mandatory question."""
        settings = WizardSettings(skip_command="suivant")
        engine = WizardEngine(PROPERTY_QUESTIONS, settings=settings)
        engine.start()

        state = engine.skip_current()

        assert state.step_index == 0
        assert "name" not in state.accumulated_record
        assert "obligatoire" in state.transcript[-1].text


class TestInFlightGuard:
    """Tests for re-entrant submissions."""

    def test_reentrant_submit_is_ignored(self):
        """Test a submission issued while another is applied does nothing."""
        engines: list[WizardEngine] = []
        inner_states = []

        def reentrant_parse(raw: str):
            inner_states.append(engines[0].submit("deuxième clic"))
            return parse_text(raw, label="Nom")

        question = QuestionSpec(
            field_id="name",
            prompt_text="Nom?",
            label="Nom",
            kind=FieldKind.TEXT,
            parse=reentrant_parse,
        )
        engine = WizardEngine([question], settings=SETTINGS)
        engines.append(engine)
        engine.start()

        state = engine.submit("Duplex Ontario")

        user_entries = [e for e in state.transcript if e.role == TranscriptRole.USER]
        assert [e.text for e in user_entries] == ["Duplex Ontario"]
        assert state.accumulated_record == {"name": "Duplex Ontario"}
        assert state.completed
        assert len(inner_states) == 1


def _valid_answer(question: QuestionSpec) -> str:
    return {
        FieldKind.TEXT: "Desjardins",
        FieldKind.DATE: "2022-03-15",
        FieldKind.AMOUNT: "250 000",
        FieldKind.INTEGER: "60",
        FieldKind.PERCENT: "4,25",
    }[question.kind]
