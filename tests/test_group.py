from logbroker.group import ConsumerGroup


def test_new_group_is_empty():
    group = ConsumerGroup("group1")
    assert group.group_id == "group1"
    assert group.members == {}
    assert group.partition_assignment == {}


def test_add_and_remove_members():
    group = ConsumerGroup("group1")
    group.add_member("consumer1")
    group.add_member("consumer2")
    assert len(group.members) == 2
    group.remove_member("consumer2")
    assert len(group.members) == 1
    assert "consumer1" in group.members


def test_new_member_has_no_partitions():
    group = ConsumerGroup("group1")
    group.add_member("consumer1")
    assert group.get_assigned_partitions("consumer1") == []


def test_unknown_member_has_no_assignment():
    group = ConsumerGroup("group1")
    assert group.get_assigned_partitions("nobody") is None


def test_re_adding_member_resets_partitions():
    group = ConsumerGroup("group1")
    group.add_member("consumer1")
    group.members["consumer1"].assigned_partitions.append(4)
    group.add_member("consumer1")
    assert group.get_assigned_partitions("consumer1") == []


def test_remove_member_releases_partition_assignment():
    group = ConsumerGroup("group1")
    group.add_member("a")
    group.add_member("b")
    group.partition_assignment.update({0: "a", 1: "b", 2: "a"})
    group.remove_member("a")
    assert group.partition_assignment == {1: "b"}


def test_remove_unknown_member_leaves_group_unchanged():
    group = ConsumerGroup("group1")
    group.add_member("a")
    group.remove_member("zzz")
    assert list(group.members) == ["a"]