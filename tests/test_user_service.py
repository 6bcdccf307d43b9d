from typing import Dict, List

import pytest

from app.api.dto.user_dto import AddLinkRequestDTO, EditProfileRequestDTO
from app.api.services.user_service import UserService
from app.core.exceptions import AuthorizationError, LinkNotFoundError, ValidationError
from app.domain.models.link import LinkType, ProfileLinkModel
from app.domain.models.user import IdentityModel

pytestmark = pytest.mark.anyio("asyncio")

MODULE = "app.api.services.user_service"


class FakeCache:
    def __init__(self):
        self.store: Dict[str, dict] = {}
        self.invalidated: List[str] = []

    async def get_or_set_profile(self, username, viewer_id, factory):
        key = f"{username}:{viewer_id}"
        if key not in self.store:
            value = await factory()
            if value is None:
                return None
            self.store[key] = value
        return self.store[key]

    async def invalidate_profile(self, *usernames):
        for username in usernames:
            self.invalidated.append(username)
            for key in [k for k in self.store if k.startswith(f"{username}:")]:
                del self.store[key]
        return len(usernames)


class FakeUsers:
    def __init__(self, *users):
        self.users = {user.id: user for user in users}

    async def get_by_id(self, user_id):
        return self.users.get(user_id)

    async def get_by_username(self, username):
        return next((u for u in self.users.values() if u.username == username), None)

    async def update(self, user_id, update):
        user = self.users[user_id]
        self.users[user_id] = user.model_copy(update=update.model_dump(exclude_unset=True))
        return self.users[user_id]

    async def delete(self, user_id):
        return self.users.pop(user_id, None) is not None


class FakeLinks:
    def __init__(self):
        self.links: List[ProfileLinkModel] = []

    async def create(self, user_id, url, link_type):
        link = ProfileLinkModel(id=f"link-{len(self.links) + 1}", user_id=user_id, url=url, type=link_type)
        self.links.append(link)
        return link

    async def list_for_user(self, user_id):
        return [link for link in self.links if link.user_id == user_id]

    async def delete(self, user_id, link_id):
        before = len(self.links)
        self.links = [l for l in self.links if not (l.id == link_id and l.user_id == user_id)]
        return len(self.links) < before

    async def delete_for_user(self, user_id):
        self.links = [l for l in self.links if l.user_id != user_id]


class FakeLikes:
    def __init__(self):
        self.likes = set()

    async def has_liked(self, user_id, target_id):
        return (user_id, target_id) in self.likes

    async def count(self, target_id):
        return sum(1 for _, target in self.likes if target == target_id)

    async def toggle(self, user_id, target_id):
        if (user_id, target_id) in self.likes:
            self.likes.remove((user_id, target_id))
            return False
        self.likes.add((user_id, target_id))
        return True

    async def targets_liked_by(self, user_id):
        return [target for liker, target in self.likes if liker == user_id]

    async def delete_for_user(self, user_id):
        self.likes = {pair for pair in self.likes if user_id not in pair}


class FakePosts:
    async def count_for_user(self, user_id):
        return 3

    async def delete_for_user(self, user_id):
        return []


@pytest.fixture
def fakes(monkeypatch):
    users = FakeUsers(
        IdentityModel(id="u1", username="ada", email="a@x.com", password="hash"),
        IdentityModel(id="u2", username="bob", email="b@x.com", password="hash"),
    )
    fakes = {
        "users": users,
        "links": FakeLinks(),
        "likes": FakeLikes(),
        "cache": FakeCache(),
    }
    monkeypatch.setattr(f"{MODULE}.user_repository", users)
    monkeypatch.setattr(f"{MODULE}.link_repository", fakes["links"])
    monkeypatch.setattr(f"{MODULE}.like_repository", fakes["likes"])
    monkeypatch.setattr(f"{MODULE}.post_repository", FakePosts())
    monkeypatch.setattr(f"{MODULE}.cache_service", fakes["cache"])
    return fakes


@pytest.mark.anyio
async def test_edit_profile_renames_and_invalidates_both_usernames(fakes):
    me = await UserService().edit_profile("u1", EditProfileRequestDTO(username="ada2"))

    assert me.username == "ada2"
    assert fakes["users"].users["u1"].tagline is None
    assert set(fakes["cache"].invalidated) == {"ada", "ada2"}


@pytest.mark.anyio
async def test_edit_profile_with_only_blank_fields_is_rejected(fakes):
    with pytest.raises(ValidationError):
        await UserService().edit_profile("u1", EditProfileRequestDTO(username=" ", tagline=""))


@pytest.mark.anyio
async def test_links_of_same_type_are_kept_in_creation_order(fakes):
    service = UserService()
    await service.add_link("u1", AddLinkRequestDTO(url="https://github.com/ada"))
    await service.add_link("u1", AddLinkRequestDTO(url="https://github.com/ada-alt"))

    profile = await service.get_profile("ada", viewer_id=None)

    assert [link.type for link in profile.links] == [LinkType.GITHUB, LinkType.GITHUB]
    assert [link.url for link in profile.links] == [
        "https://github.com/ada",
        "https://github.com/ada-alt",
    ]


@pytest.mark.anyio
async def test_delete_someone_elses_link_is_not_found(fakes):
    link = await UserService().add_link("u2", AddLinkRequestDTO(url="https://bob.dev"))

    with pytest.raises(LinkNotFoundError):
        await UserService().delete_link("u1", link.id)


@pytest.mark.anyio
async def test_like_toggle_updates_count_and_viewer_state(fakes):
    service = UserService()

    first = await service.like_profile("u1", "u2")
    profile = await service.get_profile("bob", viewer_id="u1")
    second = await service.like_profile("u1", "u2")

    assert (first.liked, first.like_count) == (True, 1)
    assert profile.auth_user_has_liked is True
    assert profile.like_count == 1
    assert profile.image_count == 3
    assert (second.liked, second.like_count) == (False, 0)


@pytest.mark.anyio
async def test_cannot_like_own_profile(fakes):
    with pytest.raises(AuthorizationError):
        await UserService().like_profile("u1", "u1")


@pytest.mark.anyio
async def test_link_url_is_stored_as_entered(fakes):
    link = await UserService().add_link("u1", AddLinkRequestDTO(url="https://x.com"))

    assert link.url == "https://x.com"
    assert link.type is LinkType.TWITTER
    assert fakes["links"].links[0].url == "https://x.com"


@pytest.mark.anyio
async def test_delete_account_refreshes_profiles_the_user_liked(fakes):
    service = UserService()
    await service.like_profile("u1", "u2")
    before = await service.get_profile("bob", viewer_id=None)

    await service.delete_account("u1")
    after = await service.get_profile("bob", viewer_id=None)

    assert before.like_count == 1
    assert after.like_count == 0
    assert {"ada", "bob"} <= set(fakes["cache"].invalidated)
    assert "u1" not in fakes["users"].users
