"""Pytest configuration and shared BPMN fixtures for bpmn-diff tests."""

import sys
from pathlib import Path

import pytest

# Add the project root to the path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from bpmn_diff.models.elements import ElementSet, ProcessElement  # noqa: E402

BPMN_NS = "http://www.omg.org/spec/BPMN/20100524/MODEL"
CAMUNDA_NS = "http://camunda.org/schema/1.0/bpmn"


ORIGINAL_BPMN = f"""<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="{BPMN_NS}"
    xmlns:bpmndi="http://www.omg.org/spec/BPMN/20100524/DI"
    xmlns:dc="http://www.omg.org/spec/DD/20100524/DC"
    xmlns:camunda="{CAMUNDA_NS}"
    id="Definitions_1" targetNamespace="http://bpmn.io/schema/bpmn">
  <bpmn:process id="Process_Order" name="Order handling" isExecutable="true">
    <bpmn:startEvent id="StartEvent_1" name="Order received">
      <bpmn:outgoing>Flow_1</bpmn:outgoing>
    </bpmn:startEvent>
    <bpmn:userTask id="Task_Review" name="Review order" camunda:assignee="alice">
      <bpmn:extensionElements>
        <camunda:taskListener event="create" class="com.example.ReviewListener" />
      </bpmn:extensionElements>
    </bpmn:userTask>
    <bpmn:exclusiveGateway id="Gateway_Check" name="Approved?" />
    <bpmn:serviceTask id="Task_Ship" name="Ship order" camunda:class="com.example.Ship" />
    <bpmn:endEvent id="EndEvent_1" name="Done" />
    <bpmn:sequenceFlow id="Flow_1" sourceRef="StartEvent_1" targetRef="Task_Review" />
    <bpmn:sequenceFlow id="Flow_2" sourceRef="Task_Review" targetRef="Gateway_Check" />
    <bpmn:sequenceFlow id="Flow_3" name="yes" sourceRef="Gateway_Check" targetRef="Task_Ship" />
    <bpmn:sequenceFlow id="Flow_4" sourceRef="Task_Ship" targetRef="EndEvent_1" />
    <bpmn:textAnnotation id="Note_1">
      <bpmn:text>Check stock first</bpmn:text>
    </bpmn:textAnnotation>
    <bpmn:association id="Assoc_1" sourceRef="Task_Review" targetRef="Note_1" />
  </bpmn:process>
  <bpmndi:BPMNDiagram id="BPMNDiagram_1">
    <bpmndi:BPMNPlane id="BPMNPlane_1" bpmnElement="Process_Order">
      <bpmndi:BPMNShape id="Task_Review_di" bpmnElement="Task_Review">
        <dc:Bounds x="100" y="80" width="100" height="80" />
      </bpmndi:BPMNShape>
    </bpmndi:BPMNPlane>
  </bpmndi:BPMNDiagram>
</bpmn:definitions>
"""

MODIFIED_BPMN = f"""<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="{BPMN_NS}"
    xmlns:bpmndi="http://www.omg.org/spec/BPMN/20100524/DI"
    xmlns:dc="http://www.omg.org/spec/DD/20100524/DC"
    xmlns:camunda="{CAMUNDA_NS}"
    id="Definitions_1" targetNamespace="http://bpmn.io/schema/bpmn">
  <bpmn:process id="Process_Order" name="Order handling" isExecutable="true">
    <bpmn:startEvent id="StartEvent_1" name="Order received">
      <bpmn:outgoing>Flow_1</bpmn:outgoing>
    </bpmn:startEvent>
    <bpmn:userTask id="Task_Review" name="Review order" camunda:assignee="bob"
        camunda:candidateGroups="managers">
      <bpmn:extensionElements>
        <camunda:taskListener event="create" class="com.example.ReviewListener" />
      </bpmn:extensionElements>
    </bpmn:userTask>
    <bpmn:exclusiveGateway id="Gateway_Check" name="Order approved?" />
    <bpmn:serviceTask id="Task_Invoice" name="Send invoice" camunda:class="com.example.Invoice" />
    <bpmn:endEvent id="EndEvent_1" name="Done" />
    <bpmn:sequenceFlow id="Flow_1" sourceRef="StartEvent_1" targetRef="Task_Review" />
    <bpmn:sequenceFlow id="Flow_2" sourceRef="Task_Review" targetRef="Gateway_Check" />
    <bpmn:sequenceFlow id="Flow_3" name="yes" sourceRef="Gateway_Check" targetRef="Task_Invoice" />
    <bpmn:sequenceFlow id="Flow_5" sourceRef="Task_Invoice" targetRef="EndEvent_1" />
    <bpmn:textAnnotation id="Note_1">
      <bpmn:text>Check stock first</bpmn:text>
    </bpmn:textAnnotation>
    <bpmn:association id="Assoc_1" sourceRef="Task_Review" targetRef="Note_1" />
  </bpmn:process>
  <bpmndi:BPMNDiagram id="BPMNDiagram_1">
    <bpmndi:BPMNPlane id="BPMNPlane_1" bpmnElement="Process_Order">
      <bpmndi:BPMNShape id="Task_Review_di" bpmnElement="Task_Review">
        <dc:Bounds x="340" y="200" width="100" height="80" />
      </bpmndi:BPMNShape>
    </bpmndi:BPMNPlane>
  </bpmndi:BPMNDiagram>
</bpmn:definitions>
"""

# Same process as ORIGINAL_BPMN, authored with a default namespace and 'c' for Camunda
REPREFIXED_BPMN = f"""<?xml version="1.0" encoding="UTF-8"?>
<definitions xmlns="{BPMN_NS}" xmlns:c="{CAMUNDA_NS}" id="Definitions_1">
  <process id="Process_Order" name="Order handling" isExecutable="true">
    <startEvent id="StartEvent_1" name="Order received" />
    <userTask id="Task_Review" name="Review order" c:assignee="alice" />
    <exclusiveGateway id="Gateway_Check" name="Approved?" />
    <serviceTask id="Task_Ship" name="Ship order" c:class="com.example.Ship" />
    <endEvent id="EndEvent_1" name="Done" />
    <sequenceFlow id="Flow_1" sourceRef="StartEvent_1" targetRef="Task_Review" />
    <sequenceFlow id="Flow_2" sourceRef="Task_Review" targetRef="Gateway_Check" />
    <sequenceFlow id="Flow_3" name="yes" sourceRef="Gateway_Check" targetRef="Task_Ship" />
    <sequenceFlow id="Flow_4" sourceRef="Task_Ship" targetRef="EndEvent_1" />
    <textAnnotation id="Note_1"><text>Check stock first</text></textAnnotation>
    <association id="Assoc_1" sourceRef="Task_Review" targetRef="Note_1" />
  </process>
</definitions>
"""


def definitions(body: str) -> str:
    """Wrap process content in a Camunda-style definitions document."""
    return (
        f'<bpmn:definitions xmlns:bpmn="{BPMN_NS}" xmlns:camunda="{CAMUNDA_NS}" id="Defs">'
        f'<bpmn:process id="Process_1">{body}</bpmn:process>'
        "</bpmn:definitions>"
    )


def element(element_id: str, element_type: str = "task", name: str = "", **properties) -> ProcessElement:
    """Build a ProcessElement with un-namespaced properties."""
    return ProcessElement(id=element_id, type=element_type, name=name, properties=properties)


def element_set(*elements: ProcessElement) -> ElementSet:
    return ElementSet.from_elements(list(elements))


@pytest.fixture
def original_xml() -> str:
    return ORIGINAL_BPMN


@pytest.fixture
def modified_xml() -> str:
    return MODIFIED_BPMN


@pytest.fixture
def reprefixed_xml() -> str:
    return REPREFIXED_BPMN


@pytest.fixture
def make_definitions():
    return definitions


@pytest.fixture
def make_element():
    return element


@pytest.fixture
def make_element_set():
    return element_set
