from fastapi import APIRouter, Depends, HTTPException, Response, status

from bela360.api.v1.schemas import (
    BookingDraftSchema,
    ConversationStateSchema,
    SetConversationRequestSchema,
    UpdateConversationRequestSchema,
)
from bela360.application.exceptions import ConversationStoreError
from bela360.application.ports.conversation_store import ConversationStorePort
from bela360.domain.entities.conversation_state import ConversationState
from bela360.wiring.dependencies import get_conversation_store

router = APIRouter(prefix="/conversations")


def _to_schema(state: ConversationState) -> ConversationStateSchema:
    draft = state.data
    return ConversationStateSchema(
        step=state.step,
        data=BookingDraftSchema(
            service_id=draft.service_id,
            service_name=draft.service_name,
            professional_id=draft.professional_id,
            professional_name=draft.professional_name,
            date=draft.date,
            time=draft.time,
            appointment_id=draft.appointment_id,
        ),
        last_message_at=state.last_message_at,
        expires_at=state.expires_at,
    )


@router.get("/{business_id}/{client_phone}", response_model=ConversationStateSchema)
def get_conversation(
    business_id: str,
    client_phone: str,
    store: ConversationStorePort = Depends(get_conversation_store),
):
    state = store.get(business_id, client_phone)
    if state is None:
        raise HTTPException(status_code=404, detail="No conversation in progress")
    return _to_schema(state)


@router.put("/{business_id}/{client_phone}", response_model=ConversationStateSchema)
def set_conversation(
    business_id: str,
    client_phone: str,
    req: SetConversationRequestSchema,
    store: ConversationStorePort = Depends(get_conversation_store),
):
    try:
        state = store.set(business_id, client_phone, req.step, req.data.model_dump(exclude_unset=True))
    except ConversationStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _to_schema(state)


@router.patch("/{business_id}/{client_phone}", response_model=ConversationStateSchema)
def update_conversation(
    business_id: str,
    client_phone: str,
    req: UpdateConversationRequestSchema,
    store: ConversationStorePort = Depends(get_conversation_store),
):
    try:
        state = store.update_data(business_id, client_phone, req.data.model_dump(exclude_unset=True))
    except ConversationStoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    if state is None:
        raise HTTPException(status_code=404, detail="No conversation in progress")
    return _to_schema(state)


@router.delete("/{business_id}/{client_phone}", status_code=status.HTTP_204_NO_CONTENT)
def clear_conversation(
    business_id: str,
    client_phone: str,
    store: ConversationStorePort = Depends(get_conversation_store),
) -> Response:
    store.clear(business_id, client_phone)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
