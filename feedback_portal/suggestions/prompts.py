"""
Prompt templates for drafting replies to patient feedback.
"""

from feedback_portal.config import HOSPITAL_NAME


SYSTEM_PROMPT = f"""Bạn là một quản lý chăm sóc khách hàng tại {HOSPITAL_NAME.title()}.
Bạn viết câu trả lời chuyên nghiệp, thấu cảm và lịch sự cho phản ánh của bệnh nhân.
Chỉ trả về nội dung câu trả lời, không thêm tiêu đề hay giải thích."""


REPLY_PROMPT_TEMPLATE = """Hãy viết một câu trả lời cho phản ánh sau đây từ bệnh nhân.
Phản ánh thuộc khoa: {department}.
Nội dung phản ánh: "{feedback_content}".
Câu trả lời cần:
1. Cảm ơn vì sự góp ý.
2. Xin lỗi nếu có trải nghiệm không tốt.
3. Khẳng định bệnh viện sẽ xác minh và chấn chỉnh (nếu cần).
4. Giữ phong thái y đức và chuyên nghiệp.
Trả lời bằng tiếng Việt."""


# Used whenever the generation server cannot produce a reply
FALLBACK_REPLY_TEMPLATE = (
    "Chúng tôi chân thành cảm ơn ý kiến đóng góp của quý khách. "
    "Bệnh viện đã ghi nhận phản ánh tại {department} và đang tiến hành kiểm tra làm rõ."
)

TEMPERATURE = 0.7
TOP_P = 0.8


def build_reply_prompt(feedback_content: str, department: str) -> str:
    return REPLY_PROMPT_TEMPLATE.format(
        feedback_content=feedback_content.strip(),
        department=department,
    )


def fallback_reply(department: str) -> str:
    return FALLBACK_REPLY_TEMPLATE.format(department=department)
