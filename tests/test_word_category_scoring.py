from games.word_category import count_valid_words, score_category


def points(scores):
    return {score.participant_id: score.points for score in scores}


def test_unique_answers_score_per_word():
    scores = score_category({'alice': 'Cat', 'bob': 'Car'}, 'C')
    assert points(scores) == {'alice': 10, 'bob': 10}


def test_duplicates_score_nothing_for_everyone():
    scores = score_category({'alice': 'Cat', 'bob': ' cat ', 'carol': 'Cow'}, 'C')

    assert points(scores) == {'alice': 0, 'bob': 0, 'carol': 10}
    assert [s.duplicate for s in scores] == [True, True, False]


def test_wrong_first_letter_scores_nothing():
    scores = score_category({'alice': 'Dog', 'bob': 'Big Cat'}, 'C')

    assert points(scores) == {'alice': 0, 'bob': 0}
    assert all(s.wrong_letter for s in scores)


def test_wrong_letter_answers_do_not_cause_duplicates():
    scores = score_category({'alice': 'Dog', 'bob': 'dog', 'carol': 'Cat'}, 'C')
    assert points(scores) == {'alice': 0, 'bob': 0, 'carol': 10}
    assert not any(s.duplicate for s in scores)


def test_rejected_answers_score_nothing():
    scores = score_category({'alice': 'Cat', 'bob': 'Cheetah'}, 'C', rejected={'bob'})

    assert points(scores) == {'alice': 10, 'bob': 0}
    assert scores[1].rejected


def test_every_matching_word_counts():
    scores = score_category({'alice': 'Crazy Cool Cat', 'bob': 'Cute dog'}, 'c')
    assert points(scores) == {'alice': 30, 'bob': 10}


def test_empty_answers_score_nothing():
    scores = score_category({'alice': '', 'bob': '   '}, 'C')
    assert points(scores) == {'alice': 0, 'bob': 0}
    assert not any(s.wrong_letter or s.duplicate for s in scores)


def test_points_per_word_is_configurable():
    scores = score_category({'alice': 'Cat Coat'}, 'C', points_per_word=5)
    assert points(scores) == {'alice': 10}


def test_count_valid_words_skips_leading_punctuation():
    assert count_valid_words('"Cat" (Cow)', 'C') == 2
    assert count_valid_words('the Cat', 'C') == 1
    assert count_valid_words('', 'C') == 0
    assert count_valid_words('Cat', '') == 0
