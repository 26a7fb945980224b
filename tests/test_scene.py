"""Unit tests for the in-memory flight scene."""

import numpy as np
import pytest
from numpy.testing import assert_allclose

from snapdock.alignment import solve
from snapdock.dynamics.state import RigidBodyState, axis_angle_quaternion
from snapdock.errors import HostStateError, SnapDockError
from snapdock.simulation import FlightScene, GameScene, MessageBoard
from snapdock.validation import ControlSelection, TargetSelection, validate
from snapdock.vessel import ActionGroup, NodeTransform


@pytest.fixture
def scene():
    return FlightScene.rendezvous(
        chaser_node=NodeTransform.from_axes([2, 0, 0], [1, 0, 0], [0, 1, 0]),
        target_node=NodeTransform.from_axes([20, 5, 0], [0, -1, 0], [0, 0, 1]),
        chaser_state=RigidBodyState.at_rest(x=0.0),
        target_state=RigidBodyState.at_rest(x=20.0, y=10.0),
    )


@pytest.fixture
def chaser(scene):
    return scene.active_vessel


class TestRendezvous:

    def test_selection(self, scene, chaser):
        assert chaser.name == "Chaser"
        assert scene.target is scene.vessels[1].docking_ports[0]
        assert chaser.reference_part is not None
        assert scene.vessels[1].reference_part is None
        assert scene.is_flight

    def test_other_scene(self, scene):
        scene.scene = GameScene.EDITOR
        assert not scene.is_flight

    def test_answers_selection_queries(self, scene):
        assert isinstance(scene, ControlSelection)
        assert isinstance(scene, TargetSelection)


class TestOnRails:
    """Physics suspension is scoped."""

    def test_on_rails_inside_block_only(self, scene, chaser):
        assert not scene.is_on_rails(chaser)
        with scene.on_rails(chaser) as vessel:
            assert vessel is chaser
            assert scene.is_on_rails(chaser)
        assert not scene.is_on_rails(chaser)

    def test_resumes_on_error(self, scene, chaser):
        with pytest.raises(RuntimeError):
            with scene.on_rails(chaser):
                raise RuntimeError("boom")
        assert not scene.is_on_rails(chaser)

    def test_not_reentrant(self, scene, chaser):
        with scene.on_rails(chaser):
            with pytest.raises(HostStateError, match="already on rails"):
                with scene.on_rails(chaser):
                    pass
        assert not scene.is_on_rails(chaser)

    def test_tracked_by_vessel_identity(self, scene, chaser):
        """Vessels sharing a name are still suspended independently."""
        station = scene.vessels[1]
        station.name = chaser.name

        with scene.on_rails(chaser):
            assert not scene.is_on_rails(station)
            with scene.on_rails(station):
                assert scene.is_on_rails(station)
            assert scene.is_on_rails(chaser)

    def test_unloaded_vessel(self, scene, chaser):
        chaser.loaded = False
        with pytest.raises(HostStateError, match="not loaded"):
            with scene.on_rails(chaser):
                pass

    def test_host_errors_share_base(self):
        assert issubclass(HostStateError, SnapDockError)


class TestRigidMotion:
    """Root moves carry the docking ports with them."""

    def test_set_rotation_requires_rails(self, scene, chaser):
        with pytest.raises(HostStateError, match="while it is in physics"):
            scene.set_rotation(chaser, axis_angle_quaternion(np.array([0.0, 0.0, 1.0]), 0.5))

    def test_set_position_requires_rails(self, scene, chaser):
        with pytest.raises(HostStateError):
            scene.set_position(chaser, np.ones(3))

    def test_set_rotation_about_root(self, scene, chaser):
        q = axis_angle_quaternion(np.array([0.0, 0.0, 1.0]), np.pi / 2)
        with scene.on_rails(chaser):
            scene.set_rotation(chaser, q)

        node = chaser.docking_ports[0].node_transform
        assert_allclose(node.position, [0, 2, 0], atol=1e-12)
        assert_allclose(node.forward, [0, 1, 0], atol=1e-12)
        assert_allclose(node.up, [-1, 0, 0], atol=1e-12)
        assert_allclose(chaser.root_rigid_body.quaternion, q, atol=1e-12)

    def test_set_position_translates(self, scene, chaser):
        with scene.on_rails(chaser):
            scene.set_position(chaser, np.array([1.0, 1.0, 1.0]))

        assert_allclose(chaser.docking_ports[0].node_transform.position, [3, 1, 1])
        assert_allclose(chaser.root_rigid_body.position, [1, 1, 1])

    def test_missing_root(self, scene, chaser):
        chaser.root_part.rigid_body = None
        with scene.on_rails(chaser):
            with pytest.raises(HostStateError, match="no root rigid body"):
                scene.set_position(chaser, np.zeros(3))

    def test_other_vessel_untouched(self, scene, chaser):
        station_node = scene.target.node_transform.position.copy()
        with scene.on_rails(chaser):
            scene.set_position(chaser, np.array([5.0, 0.0, 0.0]))
        assert_allclose(scene.target.node_transform.position, station_node)


class TestApplyPlan:
    """Applying a solved plan."""

    def _plan(self, scene):
        return solve(validate(scene.active_vessel, scene.target).candidate)

    def test_port_ends_at_standoff_facing_target(self, scene, chaser):
        scene.apply_plan(chaser, self._plan(scene))

        node = chaser.docking_ports[0].node_transform
        target = scene.target.node_transform
        assert_allclose(node.position, target.position + target.forward * 1.0, atol=1e-9)
        assert_allclose(node.forward, -target.forward, atol=1e-9)
        assert_allclose(node.up, target.up, atol=1e-9)

    def test_velocity_and_spin(self, scene, chaser):
        root = chaser.root_rigid_body
        root.velocity = np.array([3.0, 0.0, 0.0])
        root.angular_velocity = np.array([0.1, 0.2, 0.3])

        scene.apply_plan(chaser, self._plan(scene))

        # Target at rest, facing -Y: drift along +Y
        assert_allclose(root.velocity, [0, 0.15, 0], atol=1e-12)
        assert_allclose(root.angular_velocity, np.zeros(3))

    def test_disables_action_groups(self, scene, chaser):
        chaser.set_action_group(ActionGroup.SAS, True)
        chaser.set_action_group(ActionGroup.RCS, True)
        chaser.set_action_group(ActionGroup.LIGHT, True)

        scene.apply_plan(chaser, self._plan(scene))

        assert chaser.action_group(ActionGroup.SAS) is False
        assert chaser.action_group(ActionGroup.RCS) is False
        assert chaser.action_group(ActionGroup.LIGHT) is True

    def test_custom_disable_list(self, scene, chaser):
        chaser.set_action_group(ActionGroup.SAS, True)
        chaser.set_action_group(ActionGroup.RCS, True)

        scene.apply_plan(chaser, self._plan(scene), disable=(ActionGroup.RCS,))

        assert chaser.action_group(ActionGroup.SAS) is True
        assert chaser.action_group(ActionGroup.RCS) is False

    def test_off_rails_afterwards(self, scene, chaser):
        scene.apply_plan(chaser, self._plan(scene))
        assert not scene.is_on_rails(chaser)

    def test_no_root_leaves_vessel_untouched(self, scene, chaser):
        plan = self._plan(scene)
        chaser.root_part.rigid_body = None
        node_before = chaser.docking_ports[0].node_transform.position.copy()

        with pytest.raises(HostStateError):
            scene.apply_plan(chaser, plan)

        assert_allclose(chaser.docking_ports[0].node_transform.position, node_before)
        assert not scene.is_on_rails(chaser)


class TestStep:
    """Constant-velocity propagation."""

    def test_drifts_closer_after_snap(self, scene, chaser):
        scene.apply_plan(chaser, solve(validate(chaser, scene.target).candidate))

        node = chaser.docking_ports[0]
        before = node.node_transform.distance_to(scene.target.node_transform)
        scene.step(2.0)
        after = node.node_transform.distance_to(scene.target.node_transform)

        assert before == pytest.approx(1.0)
        assert after == pytest.approx(1.0 - 0.3)

    def test_skips_vessels_on_rails(self, scene, chaser):
        chaser.root_rigid_body.velocity = np.array([1.0, 0.0, 0.0])
        with scene.on_rails(chaser):
            scene.step(1.0)
        assert_allclose(chaser.root_rigid_body.position, np.zeros(3))

    def test_skips_unloaded(self, scene, chaser):
        chaser.root_rigid_body.velocity = np.array([1.0, 0.0, 0.0])
        chaser.loaded = False
        scene.step(1.0)
        assert_allclose(chaser.root_rigid_body.position, np.zeros(3))

    def test_spin_rotates_ports(self, scene, chaser):
        chaser.root_rigid_body.angular_velocity = np.array([0.0, 0.0, np.pi / 2])
        scene.step(1.0)

        node = chaser.docking_ports[0].node_transform
        assert_allclose(node.position, [0, 2, 0], atol=1e-12)
        assert_allclose(node.forward, [0, 1, 0], atol=1e-12)


class TestMessageBoard:

    def test_post_and_latest(self):
        board = MessageBoard()
        assert board.latest is None

        board.post("first", 4.0)
        board.post("second", 6.0)

        assert board.latest.text == "second"
        assert board.latest.duration == 6.0
        assert len(board.messages) == 2

    def test_clear(self):
        board = MessageBoard()
        board.post("x", 1.0)
        board.clear()
        assert board.messages == []
