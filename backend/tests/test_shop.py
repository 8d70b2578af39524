import pytest

from models.shop_item import ShopItem
from services.errors import InsufficientFundsError, NotFoundError, ValidationError
from services.shop_service import SEED_ITEMS, ShopService


def _item(db, name):
    return db.query(ShopItem).filter_by(name=name).one()


def test_listing_seeds_the_catalog_once(db, make_user):
    user = make_user()
    first = ShopService.list_items(db, user.id)
    second = ShopService.list_items(db, user.id)
    assert len(first) == len(second) == len(SEED_ITEMS)


def test_personal_rewards_are_private(db, make_user):
    user, other = make_user(), make_user()
    reward = ShopService.create_reward(db, user.id, "Movie night", "30")

    assert reward.price == 30
    assert reward.category == "reward"
    assert reward.id in [i.id for i in ShopService.list_items(db, user.id)]
    assert reward.id not in [i.id for i in ShopService.list_items(db, other.id)]
    with pytest.raises(ValidationError):
        ShopService.create_reward(db, user.id, "Cake", -1)


def test_buy_system_item_spends_game_coins(db, make_user):
    user = make_user(game_coins=1200)
    ShopService.seed(db)
    knight = _item(db, "Golden Knight")

    result = ShopService.buy(db, user, knight.id)

    assert result["user"]["game_coins"] == 700
    assert result["inventory"][0]["item"]["name"] == "Golden Knight"
    with pytest.raises(ValidationError):
        ShopService.buy(db, user, knight.id)


def test_buy_reward_spends_coins(db, make_user):
    user = make_user(coins=50, game_coins=1000)
    reward = ShopService.create_reward(db, user.id, "Pizza", 40)

    result = ShopService.buy(db, user, reward.id)

    assert result["user"]["coins"] == 10
    assert result["user"]["game_coins"] == 1000
    with pytest.raises(InsufficientFundsError):
        ShopService.buy(db, user, reward.id)


def test_consumables_stack_and_are_used_up(db, make_user):
    user = make_user(game_coins=100)
    ShopService.seed(db)
    flask = _item(db, "Flask of Wisdom")
    ShopService.buy(db, user, flask.id)
    result = ShopService.buy(db, user, flask.id)
    assert result["inventory"][0]["quantity"] == 2

    used = ShopService.use(db, user, flask.id)
    assert used["reward"] == {"type": "xp", "value": 100}
    assert used["user"]["xp"] == 100
    assert used["user"]["level"] == 2
    assert used["inventory"][0]["quantity"] == 1

    ShopService.use(db, user, flask.id)
    with pytest.raises(ValidationError):
        ShopService.use(db, user, flask.id)


def test_heal_potion_caps_hp(db, make_user):
    user = make_user(game_coins=100, hp=100)
    ShopService.seed(db)
    potion = _item(db, "Vital Potion")
    ShopService.buy(db, user, potion.id)

    result = ShopService.use(db, user, potion.id)

    assert result["user"]["hp"] == 100


def test_chest_pays_a_prize(db, make_user, monkeypatch):
    user = make_user(game_coins=50)
    ShopService.seed(db)
    chest = _item(db, "Shabby Chest")
    ShopService.buy(db, user, chest.id)
    monkeypatch.setattr("services.shop_service.random.random", lambda: 0.95)

    result = ShopService.use(db, user, chest.id)

    assert result["reward"] == {"type": "coins", "value": 100}
    assert result["user"]["coins"] == 100
    assert result["inventory"] == []


def test_equipping_cosmetics(db, make_user):
    user = make_user(game_coins=100)
    ShopService.seed(db)
    for name in ("Zeus", "Lightning Frame", "Light Mode"):
        ShopService.buy(db, user, _item(db, name).id)

    ShopService.use(db, user, _item(db, "Zeus").id)
    ShopService.use(db, user, _item(db, "Lightning Frame").id)
    result = ShopService.use(db, user, _item(db, "Light Mode").id)

    assert result["user"]["avatar"] == "/avatars/zeus.png"
    assert result["user"]["frame"] == "/frames/lightning.png"
    assert result["user"]["theme"] == "light"
    assert len(result["inventory"]) == 3


def test_unknown_item(db, make_user):
    user = make_user()
    with pytest.raises(NotFoundError):
        ShopService.buy(db, user, 999)


def test_exchange(db, make_user):
    user = make_user(game_coins=550, coins=1)

    result = ShopService.exchange(db, user, 500)

    assert result["user"]["game_coins"] == 50
    assert result["user"]["coins"] == 6
    with pytest.raises(ValidationError):
        ShopService.exchange(db, user, 99)
    with pytest.raises(InsufficientFundsError):
        ShopService.exchange(db, user, 100)
